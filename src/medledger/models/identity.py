"""Caller identity value type"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Identity:
    """
    Opaque authenticated caller identity

    Supplied by the embedding application for every call and
    compared by equality only.
    """
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Identity value must be a non-empty string")

    @classmethod
    def of(cls, value: Union["Identity", str]) -> "Identity":
        """Coerce a raw identity string into an Identity"""
        if isinstance(value, Identity):
            return value
        return cls(value)

    def __str__(self) -> str:
        return self.value


# Reserved identity that can never act as a regulator
NULL_IDENTITY = Identity("0x0000000000000000000000000000000000000000")
