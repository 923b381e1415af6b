"""
Scenario tests for chart pattern detection

Price paths are piecewise-linear closes with bars of +/-1 around each close.
"""

import pytest

from indicator_engine.schemas.indicators import PatternConfig, PatternType
from indicator_engine.services.indicators.calculations import OHLCVData
from indicator_engine.services.patterns import (
    detect_double_bottom,
    detect_double_top,
    detect_head_and_shoulders,
    detect_patterns,
)
from tests.factories import create_test_bars, piecewise_closes, random_walk

DOUBLE_X = [0, 4, 10, 15, 20, 25, 30, 39]


def _data(knots_x, knots_y, length):
    return OHLCVData.from_bars(create_test_bars(piecewise_closes(knots_x, knots_y, length)))


@pytest.fixture
def double_top():
    return _data(DOUBLE_X, [100, 100, 110, 100, 110, 97, 94, 94], 40)


@pytest.fixture
def double_bottom():
    return _data(DOUBLE_X, [100, 100, 90, 100, 90, 103, 106, 106], 40)


@pytest.fixture
def head_and_shoulders():
    return _data(
        [0, 4, 10, 15, 20, 25, 30, 35, 45, 49],
        [100, 100, 110, 102, 118, 102, 110, 100, 90, 90],
        50,
    )


@pytest.mark.scenario
class TestDoublePatterns:
    """Test Double Top / Double Bottom"""

    def test_double_top(self, double_top):
        matches = detect_patterns(double_top, PatternConfig())

        assert len(matches) == 1
        match = matches[0]
        assert match.type == PatternType.DOUBLE_TOP
        assert match.start_index == 10
        assert match.end_index == 30
        assert match.significance == 80.0

    def test_double_bottom(self, double_bottom):
        matches = detect_patterns(double_bottom, PatternConfig())

        assert len(matches) == 1
        match = matches[0]
        assert match.type == PatternType.DOUBLE_BOTTOM
        assert match.start_index == 10
        assert match.end_index == 30

    def test_double_top_reported_once(self, double_top):
        """The formation stays in the window for later bars but is not repeated"""
        matches = detect_double_top(double_top, PatternConfig())

        assert [m.start_index for m in matches] == [10]

    def test_unequal_peaks_rejected(self):
        data = _data(DOUBLE_X, [100, 100, 110, 100, 116, 97, 94, 94], 40)

        assert detect_double_top(data, PatternConfig()) == []

    def test_tolerance_is_configurable(self):
        # peaks at 111 and 114 highs: 2.7% apart
        data = _data(DOUBLE_X, [100, 100, 110, 100, 113, 97, 94, 94], 40)

        assert len(detect_double_top(data, PatternConfig(tolerance=0.03))) == 1
        assert detect_double_top(data, PatternConfig(tolerance=0.01)) == []

    def test_unconfirmed_without_neckline_break(self):
        data = _data(DOUBLE_X, [100, 100, 110, 100, 110, 103, 102, 102], 40)

        assert detect_double_top(data, PatternConfig()) == []

    def test_custom_significance(self, double_bottom):
        matches = detect_double_bottom(double_bottom, PatternConfig(double_significance=60))

        assert matches[0].significance == 60.0


@pytest.mark.scenario
class TestHeadAndShoulders:
    """Test Head and Shoulders"""

    def test_head_and_shoulders(self, head_and_shoulders):
        matches = detect_patterns(head_and_shoulders, PatternConfig())

        assert len(matches) == 1
        match = matches[0]
        assert match.type == PatternType.HEAD_AND_SHOULDERS
        assert match.start_index == 10
        assert match.end_index == 40
        assert match.significance == 85.0

    def test_head_must_be_highest(self):
        data = _data(
            [0, 4, 10, 15, 20, 25, 30, 35, 45, 49],
            [100, 100, 110, 102, 108, 102, 110, 100, 90, 90],
            50,
        )

        assert detect_head_and_shoulders(data, PatternConfig()) == []


@pytest.mark.unit
class TestPatternScan:
    """Test the combined scan"""

    def test_short_series_has_no_patterns(self):
        data = OHLCVData.from_bars(create_test_bars([100.0] * 20))

        assert detect_patterns(data) == []

    def test_results_are_ordered(self):
        closes = random_walk(400, seed=1)
        data = OHLCVData.from_bars(create_test_bars(closes, spread=0.5))

        matches = detect_patterns(data, PatternConfig(tolerance=0.05))
        keys = [(m.end_index, m.start_index) for m in matches]

        assert keys == sorted(keys)
        for m in matches:
            assert 0 <= m.start_index < m.end_index < len(data)

    def test_deterministic(self, double_top):
        assert detect_patterns(double_top) == detect_patterns(double_top)
