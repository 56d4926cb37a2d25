"""Global logical clock for audit entries"""


class SequenceGenerator:
    """
    Process-wide monotonically increasing counter

    Shared by every device and certification write, so the values it
    hands out give a total order across otherwise independent records.
    It is a logical clock, not wall time.
    """

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("Sequence start must be non-negative")
        self._value = start

    def tick(self) -> int:
        """Increment the counter and return the new value"""
        self._value += 1
        return self._value

    @property
    def current(self) -> int:
        """Last value handed out (0 before the first tick)"""
        return self._value

    def reset(self, value: int) -> None:
        """Rewind to a value captured earlier in the same transaction"""
        if value < 0 or value > self._value:
            raise ValueError(
                f"Cannot reset sequence from {self._value} to {value}"
            )
        self._value = value
