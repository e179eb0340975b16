"""Tests for ConsumptionEstimator."""

import pytest

from carestock.core.exceptions import ValidationError
from carestock.core.services import ConsumptionEstimator


class TestConsumptionEstimator:
    def test_gauze_rate(self, gauze_ledger, as_of):
        estimator = ConsumptionEstimator(gauze_ledger.snapshot())
        sample = estimator.sample("gauze", as_of=as_of)
        assert sample.total_out == 300
        assert sample.daily_rate == 10.0

    def test_stale_consumption_is_zero(self, ledger, movement, as_of):
        ledger.append(movement("IN", 50, days_ago=90))
        ledger.append(movement("OUT", 40, days_ago=45))
        assert ConsumptionEstimator(ledger).estimate_daily_rate("gauze", as_of=as_of) == 0.0

    def test_window_start_is_inclusive(self, ledger, movement, as_of):
        ledger.append(movement("OUT", 30, days_ago=30))
        ledger.append(movement("OUT", 99, days_ago=31))
        assert ConsumptionEstimator(ledger).sample("gauze", as_of=as_of).total_out == 30

    def test_in_movements_ignored(self, ledger, movement, as_of):
        ledger.append(movement("IN", 300, days_ago=1))
        assert ConsumptionEstimator(ledger).sample("gauze", as_of=as_of).total_out == 0

    def test_pools_are_separate(self, ledger, movement, as_of):
        ledger.append(movement("OUT", 6, days_ago=1))
        ledger.append(movement("OUT", 3, days_ago=1, subject_id="r1"))
        estimator = ConsumptionEstimator(ledger, window_days=3)
        assert estimator.estimate_daily_rate("gauze", as_of=as_of) == 2.0
        assert estimator.estimate_daily_rate("gauze", "r1", as_of=as_of) == 1.0

    def test_window_override(self, gauze_ledger, as_of):
        sample = ConsumptionEstimator(gauze_ledger).sample("gauze", as_of=as_of, window_days=7)
        assert sample.window_days == 7
        assert sample.total_out == 70

    @pytest.mark.parametrize("window", [0, -1])
    def test_window_must_be_positive(self, ledger, as_of, window):
        with pytest.raises(ValidationError):
            ConsumptionEstimator(ledger).sample("gauze", as_of=as_of, window_days=window)
