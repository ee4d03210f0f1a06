"""Dock areas and the manager that tracks every dockable widget."""

from __future__ import annotations

from msxdebug.docklayout import DockLayout, DockSide, Rect, SizePolicy
from msxdebug.dockplacement import Placement, dock_at, find_insert_location


class DockArea:
    """A region holding one dock layout, positioned at ``origin`` on screen."""

    def __init__(self, origin: tuple[int, int] = (0, 0)) -> None:
        self.layout = DockLayout()
        self.origin = origin

    def _to_local(self, rect: Rect) -> Rect:
        return rect.moved_to(rect.left - self.origin[0], rect.top - self.origin[1])

    def _to_global(self, rect: Rect) -> Rect:
        return rect.moved_to(rect.left + self.origin[0], rect.top + self.origin[1])

    def add_widget(self, widget, side: DockSide, distance: int,
                   width: int = -1, height: int = -1) -> None:
        self.layout.add_widget(widget, side, distance, width, height)

    def add_widget_at(self, widget, rect: Rect) -> Placement | None:
        """Dock ``widget`` where the screen rectangle ``rect`` snaps."""
        return dock_at(self.layout, widget, self._to_local(rect))

    def remove_widget(self, widget) -> bool:
        return self.layout.remove_item(widget)

    def insert_location(self, rect: Rect, policy: SizePolicy | None = None) -> Rect | None:
        """Screen rectangle where ``rect`` would dock, or None."""
        placement = find_insert_location(self.layout, self._to_local(rect), policy)
        if placement is None:
            return None
        return self._to_global(placement.rect)

    def config(self) -> list[str]:
        return self.layout.config()


class DockManager:
    """Keeps the dock areas, which area each widget lives in, and all widgets."""

    def __init__(self) -> None:
        self.areas: list[DockArea] = []
        self._area_of: dict[object, DockArea] = {}
        self._widgets: list = []

    def add_dock_area(self, area: DockArea) -> None:
        if all(existing is not area for existing in self.areas):
            self.areas.append(area)

    def dock_area_index(self, area: DockArea) -> int:
        for index, existing in enumerate(self.areas):
            if existing is area:
                return index
        raise ValueError("dock area is not managed")

    def insert_widget(self, widget, index: int, side: DockSide, distance: int,
                      width: int = -1, height: int = -1) -> None:
        """Dock ``widget`` into area ``index``; ignored if there is no such area."""
        if not 0 <= index < len(self.areas):
            return
        area = self.areas[index]
        area.add_widget(widget, side, distance, width, height)
        self._area_of[widget] = area

    def _first_area(self) -> DockArea | None:
        return next(iter(self._area_of.values()), None)

    def dock_widget(self, widget, rect: Rect) -> Placement | None:
        area = self._first_area()
        if area is None:
            return None
        self._area_of[widget] = area
        return area.add_widget_at(widget, rect)

    def undock_widget(self, widget) -> None:
        area = self._area_of.get(widget)
        if area is not None:
            area.remove_widget(widget)

    def insert_location(self, rect: Rect, policy: SizePolicy | None = None) -> Rect | None:
        area = self._first_area()
        if area is None:
            return None
        return area.insert_location(rect, policy)

    def visibility_changed(self, widget) -> None:
        area = self._area_of.get(widget)
        if area is not None:
            area.layout.changed()

    def config(self, index: int) -> list[str]:
        return self.areas[index].config()

    def attach_widget(self, widget) -> None:
        self._widgets.append(widget)

    def detach_widget(self, widget) -> None:
        self._widgets = [w for w in self._widgets if w is not widget]

    def managed_widgets(self) -> list:
        return list(self._widgets)

    def find(self, widget_id: str):
        """The first managed widget with ``widget_id``, or None."""
        return next((w for w in self._widgets if w.widget_id == widget_id), None)