"""
Process identifier model.

A ProcessIdentifier is the handle a user attaches monitoring to: either a
process name (every process with that exact name, plus descendants) or a
single PID (that process, plus descendants).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..validation import ValidationError

PID_PREFIX = "pid:"


class IdentifierKind(Enum):
    """The two ways a monitored group can be addressed."""
    NAME = "name"
    PID = "pid"


@dataclass(frozen=True)
class ProcessIdentifier:
    """
    Immutable name-or-PID handle for a monitored group.

    Equality and hashing are structural, so identifiers can be used as
    dictionary keys and compared across refresh ticks.

    Attributes:
        kind: Whether ``value`` is a process name or a PID.
        value: The process name (str) or PID (int).
    """

    kind: IdentifierKind
    value: Union[str, int]

    def __post_init__(self):
        if self.kind is IdentifierKind.PID:
            if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value < 0:
                raise ValidationError(
                    f"PID must be a non-negative integer, got {self.value!r}",
                    field_name="pid",
                    value=self.value,
                )
        elif not isinstance(self.value, str) or not self.value:
            raise ValidationError(
                f"Process name must be a non-empty string, got {self.value!r}",
                field_name="name",
                value=self.value,
            )

    @classmethod
    def from_name(cls, name: str) -> "ProcessIdentifier":
        return cls(IdentifierKind.NAME, name)

    @classmethod
    def from_pid(cls, pid: int) -> "ProcessIdentifier":
        return cls(IdentifierKind.PID, pid)

    @classmethod
    def parse(cls, text: str) -> "ProcessIdentifier":
        """
        Parse user input into an identifier.

        ``"pid:<digits>"`` becomes a PID identifier; any other text, including
        a malformed ``"pid:abc"``, is treated as a process name.

        Examples:
            >>> ProcessIdentifier.parse("pid:42").pid
            42
            >>> ProcessIdentifier.parse("firefox").name
            'firefox'
        """
        text = text.strip()
        if text.startswith(PID_PREFIX):
            digits = text[len(PID_PREFIX):]
            if digits.isdigit():
                return cls.from_pid(int(digits))
        return cls.from_name(text)

    @property
    def is_pid(self) -> bool:
        return self.kind is IdentifierKind.PID

    @property
    def pid(self) -> Optional[int]:
        """The PID for PID identifiers, None for name identifiers."""
        return self.value if self.is_pid else None

    @property
    def name(self) -> Optional[str]:
        """The process name for name identifiers, None for PID identifiers."""
        return None if self.is_pid else self.value

    def __str__(self) -> str:
        if self.is_pid:
            return f"{PID_PREFIX}{self.value}"
        return self.value
