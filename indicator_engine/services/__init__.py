"""Indicator engine services."""

from indicator_engine.services.base import BaseService, ServiceError, ValidationError

__all__ = ["BaseService", "ServiceError", "ValidationError"]
