"""A state snapshot tagged with its sequence number and time."""

import copy
from dataclasses import dataclass
from typing import Generic, TypeVar

S = TypeVar("S")


@dataclass
class TimestampedState(Generic[S]):
    """A state together with when it was made and its number."""

    timestamp: int
    num: int
    state: S

    def copy(self):
        """Return an independent copy, including a copy of the state."""
        return TimestampedState(self.timestamp, self.num, copy.deepcopy(self.state))