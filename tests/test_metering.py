"""Tests for the resource meter."""

import pytest

from trampoline.metering import RESERVE_DIVISOR, Meter, OutOfBudget


class TestMeter:
    """Tests for charging and reading a Meter."""

    def test_fresh_meter(self):
        meter = Meter(1000)
        assert meter.limit == 1000
        assert meter.used == 0
        assert meter.remaining == 1000
        assert meter.exhausted is False

    def test_consume(self):
        meter = Meter(1000)
        meter.consume(300)
        meter.consume(200)
        assert meter.used == 500
        assert meter.remaining == 500

    def test_consume_everything(self):
        meter = Meter(100)
        meter.consume(100)
        assert meter.remaining == 0
        assert meter.exhausted is True

    def test_overdraw_exhausts_meter(self):
        meter = Meter(100)
        meter.consume(40)
        with pytest.raises(OutOfBudget) as excinfo:
            meter.consume(61)
        assert excinfo.value.requested == 61
        assert excinfo.value.remaining == 60
        assert meter.remaining == 0

    def test_negative_consume_rejected(self):
        meter = Meter(100)
        with pytest.raises(ValueError):
            meter.consume(-1)
        assert meter.used == 0

    def test_exhaust(self):
        meter = Meter(100)
        meter.consume(10)
        meter.exhaust()
        assert meter.used == 100
        assert meter.exhausted is True

    @pytest.mark.parametrize("limit", [-1, 1.5, "10", True])
    def test_invalid_limit(self, limit):
        with pytest.raises(ValueError):
            Meter(limit)

    def test_zero_limit(self):
        meter = Meter(0)
        assert meter.exhausted is True
        meter.consume(0)


class TestForwardable:
    """Tests for the reservation rule on nested calls."""

    def test_default_divisor(self):
        assert RESERVE_DIVISOR == 64

    def test_keeps_back_one_sixty_fourth(self):
        meter = Meter(64_000)
        assert meter.forwardable() == 63_000

    def test_rounds_reservation_down(self):
        meter = Meter(99_850)
        assert meter.forwardable() == 99_850 - 1560

    def test_small_remainder_forwards_everything(self):
        meter = Meter(63)
        assert meter.forwardable() == 63

    def test_custom_divisor(self):
        meter = Meter(1000)
        assert meter.forwardable(reserve_divisor=10) == 900

    def test_tracks_remaining(self):
        meter = Meter(64_000)
        meter.consume(32_000)
        assert meter.forwardable() == 31_500
