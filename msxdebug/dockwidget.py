"""A titled panel that can be docked into a layout or float freely."""

from __future__ import annotations

from typing import Callable

from msxdebug.docklayout import WIDGET_SIZE_MAX, LayoutItem, Rect, SizePolicy

DRAG_THRESHOLD = 20


class DockableWidget(LayoutItem):
    """A panel managed by a dock manager; it can be dragged, docked and closed.

    The manager must offer ``attach_widget``, ``detach_widget``,
    ``undock_widget``, ``dock_widget(widget, rect)`` and
    ``insert_location(rect, policy)`` returning a Rect or None.
    """

    def __init__(self, manager, widget_id: str = "", *, title: str = "",
                 hint_width: int = 0, hint_height: int = 0,
                 min_width: int = 0, min_height: int = 0,
                 max_width: int = WIDGET_SIZE_MAX, max_height: int = WIDGET_SIZE_MAX,
                 policy: SizePolicy | None = None) -> None:
        super().__init__(widget_id=widget_id, hint_width=hint_width,
                         hint_height=hint_height, min_width=min_width,
                         min_height=min_height, max_width=max_width,
                         max_height=max_height, policy=policy or SizePolicy())
        self.manager = manager
        self.title = title
        self.floating = False
        self.movable = True
        self.closable = True
        self.destroyable = True
        self.destroyed = False
        self.close_button_visible = True
        self.status_bar_visible = False
        self.x = 0
        self.y = 0
        self.width = hint_width
        self.height = hint_height
        self.dragging = False
        self.rubber_band: Rect | None = None
        self._drag_start = (0, 0)
        self._drag_offset = (0, 0)
        self.visibility_listeners: list[Callable[[DockableWidget], None]] = []
        manager.attach_widget(self)

    @property
    def label_text(self) -> str:
        return f"{self.title}:"

    def set_floating(self, enable: bool, show_now: bool = True) -> None:
        if self.floating == enable:
            return
        self.floating = enable
        if not self.policy.fixed_width and not self.policy.fixed_height:
            self.status_bar_visible = enable
        if enable and show_now:
            self.show()

    def set_movable(self, enable: bool) -> None:
        self.movable = enable

    def set_closable(self, enable: bool) -> None:
        if self.closable == enable:
            return
        self.closable = enable
        self.close_button_visible = enable
        self.dragging = False
        self.rubber_band = None

    def set_destroyable(self, enable: bool) -> None:
        self.destroyable = enable

    def show(self) -> None:
        self.hidden = False

    def hide(self) -> None:
        self.hidden = True

    def close(self) -> bool:
        """Handle a close request; returns True when the widget was destroyed."""
        if not (self.closable or self.destroyable):
            return False
        if self.destroyable and self.floating:
            self.manager.undock_widget(self)
            self.hidden = True
            self.destroyed = True
            self.manager.detach_widget(self)
            return True
        self.hide()
        for listener in self.visibility_listeners:
            listener(self)
        return False

    def mouse_press(self, global_pos: tuple[int, int], local_pos: tuple[int, int]) -> None:
        """Left button pressed on the widget's title area."""
        if self.movable:
            self.dragging = True
            self._drag_start = global_pos
            self._drag_offset = local_pos

    def _dragged_far(self, global_pos: tuple[int, int]) -> bool:
        return (abs(global_pos[0] - self._drag_start[0]) > DRAG_THRESHOLD
                or abs(global_pos[1] - self._drag_start[1]) > DRAG_THRESHOLD)

    def _drag_rect(self, global_pos: tuple[int, int]) -> Rect:
        return Rect(global_pos[0] - self._drag_offset[0],
                    global_pos[1] - self._drag_offset[1],
                    self.width, self.height)

    def mouse_move(self, global_pos: tuple[int, int], button_down: bool) -> None:
        """Update the drag outline while the left button is held."""
        if not self.dragging:
            return
        if not button_down:
            self.dragging = False
            self.rubber_band = None
            return
        if self.rubber_band is None:
            if self._dragged_far(global_pos):
                self.rubber_band = self._drag_rect(global_pos)
            return
        rect = self._drag_rect(global_pos)
        location = None
        if self.floating:
            location = self.manager.insert_location(rect, self.policy)
        self.rubber_band = location if location is not None else rect

    def mouse_release(self, global_pos: tuple[int, int]) -> None:
        """Finish a drag: dock, undock or move the widget."""
        if not self.dragging:
            return
        self.dragging = False
        self.rubber_band = None
        if not self.movable or not self._dragged_far(global_pos):
            return
        target = self._drag_rect(global_pos)
        if self.floating:
            if self.manager.insert_location(target, self.policy) is not None:
                self.set_floating(False)
                self.manager.dock_widget(self, target)
            else:
                self.x, self.y = target.left, target.top
        else:
            self.manager.undock_widget(self)
            self.set_floating(True)
            self.x, self.y = target.left, target.top

    def floating_config(self) -> str:
        """Layout line ``id F visibility x y width height`` for this widget."""
        visibility = "H" if self.hidden else "V"
        return f"{self.widget_id} F {visibility} {self.x} {self.y} {self.width} {self.height}"