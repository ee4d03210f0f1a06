"""Saving and restoring the arrangement of dockable panels.

A layout is a list of text lines, one per panel:

* ``id D visibility side distance width height`` for a docked panel,
  with visibility ``V``/``H`` and side ``T``, ``L``, ``R`` or ``B``;
* ``id F visibility x y width height`` for a floating panel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from msxdebug.docklayout import DockSide

_SIDES = {"T": DockSide.TOP, "L": DockSide.LEFT, "R": DockSide.RIGHT}
_FIELD_COUNT = 7
_DEFAULT_IDS = ("CODEVIEW", "REGISTERS", "FLAGS", "SLOTS", "STACK")


def _to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


@dataclass(frozen=True)
class LayoutEntry:
    """Saved position of one panel, docked or floating."""

    widget_id: str
    floating: bool
    visible: bool = True
    side: DockSide = DockSide.BOTTOM
    distance: int = 0
    x: int = 0
    y: int = 0
    width: int = -1
    height: int = -1

    @classmethod
    def parse(cls, text: str) -> LayoutEntry:
        """Read one layout line; raises ValueError when it is malformed."""
        fields = text.split()
        if len(fields) < _FIELD_COUNT:
            raise ValueError(f"layout line has too few fields: {text!r}")
        widget_id, kind, visibility = fields[0], fields[1], fields[2]
        if kind == "D":
            return cls(
                widget_id=widget_id,
                floating=False,
                visible=visibility != "H",
                side=_SIDES.get(fields[3], DockSide.BOTTOM),
                distance=_to_int(fields[4]),
                width=_to_int(fields[5]),
                height=_to_int(fields[6]),
            )
        if kind == "F":
            return cls(
                widget_id=widget_id,
                floating=True,
                visible=visibility == "V",
                x=_to_int(fields[3]),
                y=_to_int(fields[4]),
                width=_to_int(fields[5]),
                height=_to_int(fields[6]),
            )
        raise ValueError(f"unknown layout kind {kind!r} in {text!r}")

    def __str__(self) -> str:
        if self.floating:
            visibility = "V" if self.visible else "H"
            return (f"{self.widget_id} F {visibility} {self.x} {self.y} "
                    f"{self.width} {self.height}")
        visibility = "V" if self.visible else "H"
        return (f"{self.widget_id} D {visibility} {self.side.value} {self.distance} "
                f"{self.width} {self.height}")


def default_layout(sizes: Mapping[str, tuple[int, int]]) -> list[str]:
    """The initial layout, given the (width, height) hints of the main panels."""
    missing = [name for name in _DEFAULT_IDS if name not in sizes]
    if missing:
        raise ValueError(f"missing size hints for: {', '.join(missing)}")
    reg_w, reg_h = sizes["REGISTERS"]
    code_w, code_h = sizes["CODEVIEW"]
    flag_w = sizes["FLAGS"][0]
    slot_w = sizes["SLOTS"][0]
    stack_w = sizes["STACK"][0]
    return [
        "CODEVIEW D V R 0 -1 -1",
        "REGISTERS D V R 0 -1 -1",
        "FLAGS D V R 0 -1 -1",
        f"SLOTS D V R 0 -1 {reg_h}",
        f"STACK D V R 0 -1 {code_h}",
        f"MEMORY D V B {code_w} {reg_w + flag_w + slot_w} {code_h - reg_h}",
        f"DEBUG D V B {code_w} {reg_w + flag_w + slot_w + stack_w} -1",
    ]


def apply_layout(manager, entries: Iterable[LayoutEntry | str]) -> None:
    """Dock or float the manager's panels as ``entries`` describe.

    Entries naming a panel the manager does not know are skipped.
    """
    for entry in entries:
        if isinstance(entry, str):
            entry = LayoutEntry.parse(entry)
        widget = manager.find(entry.widget_id)
        if widget is None:
            continue
        if entry.floating:
            widget.set_floating(True, entry.visible)
            if not entry.visible:
                widget.hide()
            widget.width = entry.width
            widget.height = entry.height
            widget.x = entry.x
            widget.y = entry.y
        else:
            manager.insert_widget(widget, 0, entry.side, entry.distance,
                                  entry.width, entry.height)
            if not entry.visible:
                widget.hide()


def save_layout(manager) -> list[str]:
    """Layout lines for the first dock area followed by every floating panel."""
    lines = list(manager.config(0))
    lines.extend(widget.floating_config()
                 for widget in manager.managed_widgets() if widget.floating)
    return lines