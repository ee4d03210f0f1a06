"""Interpretation of the Z80 flag register for display."""

from __future__ import annotations

from dataclasses import dataclass

_NAMES = ("C", "N", "P", "", "H", "", "Z", "S")
_ON = ("(C)", "", "(PE)", "", "", "", "(Z)", "(M)")
_OFF = ("(NC)", "", "(PO)", "", "", "", "(NZ)", "(P)")


@dataclass(frozen=True)
class FlagRow:
    """One displayed flag line: name, bit value, whether it changed, meaning."""

    bit: int
    name: str
    value: str
    changed: bool
    description: str


def _check_byte(value: int) -> int:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"flag byte out of range: {value}")
    return value


def describe_flags(flags: int, changed: int = 0) -> list[FlagRow]:
    """Rows for bits 7 down to 0 of ``flags``; ``changed`` marks changed bits."""
    _check_byte(flags)
    _check_byte(changed)
    rows = []
    for bit in range(7, -1, -1):
        mask = 1 << bit
        is_set = bool(flags & mask)
        rows.append(FlagRow(
            bit=bit,
            name=_NAMES[bit],
            value="1" if is_set else "0",
            changed=bool(changed & mask),
            description=_ON[bit] if is_set else _OFF[bit],
        ))
    return rows


class FlagsView:
    """Holds the current flag byte and which bits changed with the last update."""

    def __init__(self) -> None:
        self.flags = 0
        self.changed = 0

    def set_flags(self, flags: int) -> None:
        _check_byte(flags)
        self.changed = self.flags ^ flags
        self.flags = flags

    def rows(self) -> list[FlagRow]:
        return describe_flags(self.flags, self.changed)