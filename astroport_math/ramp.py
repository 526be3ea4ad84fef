"""
Time-ramped pool parameters (amplification, gamma).

A ramp phases a parameter from its initial to its future value linearly
between two timestamps. Resolution is an explicit (ramp, timestamp) query with
no wall-clock dependency.
"""

import logging
from dataclasses import dataclass

from .decimal_core import FixedDecimal
from .exceptions import InvalidRampConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RampedParameter:
    """
    Linear schedule for a pool parameter.

    Attributes:
        initial_value: Value at and before ``initial_time``
        initial_time: Ramp start (unix seconds)
        future_value: Value at and after ``future_time``
        future_time: Ramp end (unix seconds)
    """

    initial_value: FixedDecimal
    initial_time: int
    future_value: FixedDecimal
    future_time: int

    def __post_init__(self):
        if self.initial_time < 0 or self.future_time < 0:
            raise InvalidRampConfig(
                f"Ramp times must be non-negative: "
                f"initial_time={self.initial_time}, future_time={self.future_time}"
            )
        if self.future_time < self.initial_time:
            raise InvalidRampConfig(
                f"Ramp ends before it starts: "
                f"initial_time={self.initial_time}, future_time={self.future_time}",
                details={
                    "initial_time": self.initial_time,
                    "future_time": self.future_time,
                },
            )
        if (
            self.future_time == self.initial_time
            and self.future_value != self.initial_value
        ):
            raise InvalidRampConfig(
                f"Zero-length ramp must keep its value: "
                f"{self.initial_value} -> {self.future_value} at t={self.initial_time}",
                details={
                    "initial_value": str(self.initial_value),
                    "future_value": str(self.future_value),
                    "time": self.initial_time,
                },
            )

    @classmethod
    def constant(cls, value: FixedDecimal, time: int = 0) -> "RampedParameter":
        """A ramp frozen at ``value``."""
        return cls(value, time, value, time)

    def resolve(self, block_time: int) -> FixedDecimal:
        return resolve(self, block_time)


def resolve(ramp: RampedParameter, block_time: int) -> FixedDecimal:
    """
    Effective parameter value at ``block_time``.

    Interpolates ``initial + (future - initial) * elapsed / duration`` with
    truncating arithmetic (multiply first, then divide), so a decreasing ramp
    truncates toward the initial value exactly like the on-chain contract.
    """
    if block_time <= ramp.initial_time:
        return ramp.initial_value
    if block_time >= ramp.future_time:
        return ramp.future_value

    elapsed = block_time - ramp.initial_time
    duration = ramp.future_time - ramp.initial_time
    value = (
        ramp.initial_value
        + (ramp.future_value - ramp.initial_value) * elapsed / duration
    )
    logger.debug(
        f"Ramp {ramp.initial_value}->{ramp.future_value} at {elapsed}/{duration}s = {value}"
    )
    return value
