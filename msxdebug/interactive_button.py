"""A toggle button bound to one bit of one VDP register."""

from __future__ import annotations

import enum
import re
from typing import Callable

_INTEGER = re.compile(r"[+-]?[0-9]+")


class ButtonColor(enum.Enum):
    """Background colour of an interactive button."""

    DEFAULT = "default"
    GREEN = "green"
    DARK_GREEN = "darkGreen"
    RED = "red"
    YELLOW = "yellow"
    DARK_RED = "darkRed"


_COLORS = {
    6: ButtonColor.GREEN,
    4: ButtonColor.DARK_GREEN,
    3: ButtonColor.RED,
    7: ButtonColor.RED,
    2: ButtonColor.YELLOW,
    5: ButtonColor.DARK_RED,
    1: ButtonColor.DARK_RED,
}


def button_color(must_be_set: bool, highlight: bool, state: bool) -> ButtonColor:
    """Colour for a button that may be required to be set and may be highlighted."""
    colorset = ((4 if must_be_set else 0) + (2 if highlight else 0)
                + (1 if must_be_set and not state else 0))
    return _COLORS.get(colorset, ButtonColor.DEFAULT)


def _to_int(text: str) -> int:
    return int(text) if _INTEGER.fullmatch(text) else 0


def parse_register_bit(name: str) -> tuple[int, int]:
    """(register, bit) from a name like ``reg_8_3``; unparsable parts give 0."""
    bit = _to_int(name[-1:])
    first = name.find("_")
    last = name.rfind("_")
    length = last - first - 1
    start = first + 1
    segment = name[start:] if length < 0 else name[start:start + length]
    return _to_int(segment), bit


class InteractiveButton:
    """Named after its register and bit; reports bit toggles to listeners."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._must_be_set = False
        self._highlight = False
        self._state = False
        self.bit_listeners: list[Callable[[int, int, bool], None]] = []
        self.mouse_listeners: list[Callable[[bool], None]] = []

    def highlight(self, state: bool) -> None:
        self._highlight = state

    def must_be_set(self, state: bool) -> None:
        self._must_be_set = state

    def toggle(self, state: bool) -> tuple[int, int, bool]:
        """Record the new checked state and report (register, bit, state)."""
        self._state = state
        reg, bit = parse_register_bit(self.name)
        for listener in self.bit_listeners:
            listener(reg, bit, state)
        return reg, bit, state

    def enter(self) -> None:
        for listener in self.mouse_listeners:
            listener(True)

    def leave(self) -> None:
        for listener in self.mouse_listeners:
            listener(False)

    def color(self) -> ButtonColor:
        return button_color(self._must_be_set, self._highlight, self._state)