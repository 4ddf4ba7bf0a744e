"""Resource metering.

A ``Meter`` is a fixed allowance of abstract resource units. Work charges
units with ``consume``; a charge that cannot be paid exhausts the meter and
raises ``OutOfBudget``.
"""

# Nested calls never get more than (divisor - 1) / divisor of what the
# caller holds at the moment of the call.
RESERVE_DIVISOR = 64


class OutOfBudget(Exception):
    """Raised when a meter cannot pay for a charge."""

    def __init__(self, requested: int, remaining: int):
        self.requested = requested
        self.remaining = remaining
        super().__init__(f"needed {requested} units, {remaining} remaining")


class Meter:
    """Track resource usage against a fixed limit."""

    def __init__(self, limit: int):
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ValueError(f"meter limit must be a non-negative int, got {limit!r}")
        self._limit = limit
        self._used = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def used(self) -> int:
        return self._used

    @property
    def remaining(self) -> int:
        return self._limit - self._used

    @property
    def exhausted(self) -> bool:
        return self._used >= self._limit

    def consume(self, units: int) -> None:
        """Charge ``units`` to this meter.

        Raises:
            ValueError: If ``units`` is negative.
            OutOfBudget: If fewer than ``units`` remain. The meter is left
                exhausted, the way a frame that runs dry loses everything.
        """
        if units < 0:
            raise ValueError(f"cannot consume a negative amount: {units}")
        remaining = self.remaining
        if units > remaining:
            self._used = self._limit
            raise OutOfBudget(units, remaining)
        self._used += units

    def exhaust(self) -> None:
        """Consume everything that is left."""
        self._used = self._limit

    def forwardable(self, reserve_divisor: int = RESERVE_DIVISOR) -> int:
        """Most this meter can hand to a nested call under the reservation rule."""
        remaining = self.remaining
        return remaining - remaining // reserve_divisor

    def __repr__(self) -> str:
        return f"Meter(limit={self._limit}, used={self._used})"
