"""Layout of dockable widgets arranged around one central, resizable widget.

The first item added to a layout is the resizable centre. Every later item is
docked against one side of the arrangement at a distance measured along that
side, and is pushed outwards until it no longer overlaps earlier items.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

WIDGET_SIZE_MAX = 16777215
HIDDEN_POSITION = -10000


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle; ``right`` and ``bottom`` are exclusive."""

    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    def intersects(self, other: Rect) -> bool:
        """True when both rectangles are non-empty and share some area."""
        if self.width <= 0 or self.height <= 0:
            return False
        if other.width <= 0 or other.height <= 0:
            return False
        return (max(self.left, other.left) < min(self.right, other.right)
                and max(self.top, other.top) < min(self.bottom, other.bottom))

    def moved_to(self, left: int, top: int) -> Rect:
        """The same-sized rectangle with its top-left corner at (left, top)."""
        return Rect(left, top, self.width, self.height)


class DockSide(enum.Enum):
    """Side of the arrangement an item is docked against."""

    TOP = "T"
    LEFT = "L"
    RIGHT = "R"
    BOTTOM = "B"


@dataclass(frozen=True)
class SizePolicy:
    """Whether an item's width and height are fixed to their hint."""

    fixed_width: bool = False
    fixed_height: bool = False


@dataclass(eq=False)
class LayoutItem:
    """Anything a dock layout can place: an id, size limits and visibility."""

    widget_id: str = ""
    hint_width: int = 0
    hint_height: int = 0
    min_width: int = 0
    min_height: int = 0
    max_width: int = WIDGET_SIZE_MAX
    max_height: int = WIDGET_SIZE_MAX
    policy: SizePolicy = field(default_factory=SizePolicy)
    hidden: bool = False


@dataclass(eq=False)
class DockEntry:
    """Placement state of one item in a dock layout."""

    item: LayoutItem
    side: DockSide
    distance: int
    left: int = 0
    top: int = 0
    width: int = -1
    height: int = -1
    use_hint_width: bool = True
    use_hint_height: bool = True

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def bounds(self) -> Rect:
        return Rect(self.left, self.top, self.width, self.height)


def _clamp(value: int, low: int, high: int) -> int:
    if value < low:
        return low
    if high < value:
        return high
    return value


class DockLayout:
    """Positions docked items and tracks the arrangement's size limits."""

    def __init__(self) -> None:
        self.entries: list[DockEntry] = []
        self._layout_width = 0
        self._layout_height = 0
        self._min_width = 0
        self._min_height = 0
        self._max_width = 0
        self._max_height = 0
        self._check_width = 0
        self._check_height = 0

    def __len__(self) -> int:
        return len(self.entries)

    def add_item(self, item, index=-1, side=DockSide.RIGHT, distance=0,
                 width=-1, height=-1) -> None:
        """Dock ``item``; an index outside the entries appends it."""
        if any(entry.item is item for entry in self.entries):
            raise ValueError(f"item {item.widget_id!r} is already in the layout")
        entry = DockEntry(item, side, distance)
        if not item.policy.fixed_width and width > 0:
            entry.width = width
            entry.use_hint_width = False
        if not item.policy.fixed_height and height > 0:
            entry.height = height
            entry.use_hint_height = False

        # the first item is the resizable centre: it needs an actual size
        if not self.entries:
            if entry.width == -1:
                entry.width = item.hint_width
            if entry.height == -1:
                entry.height = item.hint_height
            entry.use_hint_width = False
            entry.use_hint_height = False

        if -1 < index < len(self.entries):
            self.entries.insert(index, entry)
        else:
            self.entries.append(entry)
        self._calc_size_limits()

    def add_widget(self, item, side, distance, width=-1, height=-1) -> None:
        """Dock ``item`` after all existing entries."""
        self.add_item(item, -1, side, distance, width, height)

    def remove_item(self, item) -> bool:
        """Remove ``item``; returns whether it was in the layout."""
        for index, entry in enumerate(self.entries):
            if entry.item is item:
                self.take_at(index)
                return True
        return False

    def take_at(self, index):
        """Remove and return the item at ``index``, or None if out of range."""
        if not 0 <= index < len(self.entries):
            return None
        entry = self.entries.pop(index)
        self._calc_size_limits()
        return entry.item

    def item_at(self, index):
        """The item at ``index``, or None if out of range."""
        if not 0 <= index < len(self.entries):
            return None
        return self.entries[index].item

    def minimum_size(self) -> tuple[int, int]:
        return self._min_width, self._min_height

    def maximum_size(self) -> tuple[int, int]:
        return self._max_width, self._max_height

    def size_hint(self) -> tuple[int, int]:
        return self._layout_width, self._layout_height

    def set_geometry(self, width: int, height: int) -> None:
        """Resize the arrangement, growing or shrinking the central item."""
        width = _clamp(width, self._min_width, self._max_width)
        height = _clamp(height, self._min_height, self._max_height)
        dx = width - self._layout_width
        dy = height - self._layout_height
        if dx or dy:
            self._size_move(dx, dy)
            self._calc_size_limits()

    def changed(self) -> None:
        """Recompute placement after an item changed size or visibility."""
        self._calc_size_limits()

    def bounds(self, item) -> Rect:
        """Current rectangle of ``item`` within the arrangement."""
        for entry in self.entries:
            if entry.item is item:
                return entry.bounds
        raise ValueError(f"item {item.widget_id!r} is not in the layout")

    def config(self) -> list[str]:
        """One line per entry: ``id D visibility side distance width height``."""
        lines = []
        for entry in self.entries:
            visibility = "H" if entry.item.hidden else "V"
            width = -1 if entry.use_hint_width else entry.width
            height = -1 if entry.use_hint_height else entry.height
            lines.append(f"{entry.item.widget_id} D {visibility} {entry.side.value} "
                         f"{entry.distance} {width} {height}")
        return lines

    def _calc_size_limits(self) -> None:
        if not self.entries:
            return
        self._do_layout()
        first = self.entries[0]
        cur_width, cur_height = first.width, first.height
        saved = [entry.distance for entry in self.entries]

        def probe(size: int, horizontal: bool) -> bool:
            if horizontal:
                self._size_move(size - first.width, 0)
            else:
                self._size_move(0, size - first.height)
            self._do_layout(check=True)
            first.width, first.height = cur_width, cur_height
            for entry, distance in zip(self.entries[1:], saved[1:]):
                entry.distance = distance
            if horizontal:
                return (self._layout_height == self._check_height
                        and self._layout_width - self._check_width == first.width - size)
            return (self._layout_width == self._check_width
                    and self._layout_height - self._check_height == first.height - size)

        item = first.item
        for size in range(item.min_width, cur_width + 1):
            if probe(size, True):
                break
        self._min_width = self._check_width

        for size in range(item.max_width, cur_width - 1, -1):
            if probe(size, True):
                break
        self._max_width = self._check_width

        for size in range(item.min_height, cur_height + 1):
            if probe(size, False):
                break
        self._min_height = self._check_height

        for size in range(item.max_height, cur_height - 1, -1):
            if probe(size, False):
                break
        self._max_height = self._check_height

        self._do_layout()

    def _size_move(self, dx: int, dy: int) -> None:
        first = self.entries[0]
        for entry in self.entries[1:]:
            if entry.side in (DockSide.TOP, DockSide.BOTTOM):
                if entry.distance >= first.width:
                    entry.distance += dx
            if entry.side in (DockSide.LEFT, DockSide.RIGHT):
                if entry.distance >= first.height:
                    entry.distance += dy
        first.width += dx
        first.height += dy

    def _do_layout(self, check: bool = False) -> None:
        if not self.entries:
            return
        first = self.entries[0]
        first.left = 0
        first.top = 0
        centre_w, centre_h = first.width, first.height

        dx = dy = 0
        for i, d in enumerate(self.entries[1:], start=1):
            if d.item.hidden:
                d.left = HIDDEN_POSITION
                d.top = HIDDEN_POSITION
                continue
            if d.use_hint_width:
                d.width = d.item.hint_width
            if d.use_hint_height:
                d.height = d.item.hint_height
            earlier = self.entries[1:i]

            if d.side is DockSide.TOP:
                d.left = d.distance
                if d.distance >= centre_w or d.distance + d.width <= 0:
                    d.top = centre_h - d.height
                else:
                    d.top = -d.height
                for other in earlier:
                    sweep = Rect(d.left, d.top - WIDGET_SIZE_MAX,
                                 d.width, d.height + WIDGET_SIZE_MAX)
                    if sweep.intersects(other.bounds):
                        d.top = other.top - d.height
            elif d.side is DockSide.LEFT:
                d.top = d.distance
                if d.distance >= centre_h or d.distance + d.height <= 0:
                    d.left = centre_w - d.width
                else:
                    d.left = -d.width
                for other in earlier:
                    sweep = Rect(d.left - WIDGET_SIZE_MAX, d.top,
                                 d.width + WIDGET_SIZE_MAX, d.height)
                    if sweep.intersects(other.bounds):
                        d.left = other.left - d.width
            elif d.side is DockSide.RIGHT:
                d.top = d.distance
                if d.distance >= centre_h or d.distance + d.height <= 0:
                    d.left = 0
                else:
                    d.left = centre_w
                for other in earlier:
                    sweep = Rect(d.left, d.top, d.width + WIDGET_SIZE_MAX, d.height)
                    if sweep.intersects(other.bounds):
                        d.left = other.left + other.width
            else:
                d.left = d.distance
                if d.distance >= centre_w or d.distance + d.width <= 0:
                    d.top = 0
                else:
                    d.top = centre_h
                for other in earlier:
                    sweep = Rect(d.left, d.top, d.width, d.height + WIDGET_SIZE_MAX)
                    if sweep.intersects(other.bounds):
                        d.top = other.top + other.height

            dx = min(dx, d.left)
            dy = min(dy, d.top)

        width = height = 0
        for entry in self.entries:
            if not entry.item.hidden:
                entry.left -= dx
                entry.top -= dy
                width = max(width, entry.right)
                height = max(height, entry.bottom)
        if check:
            self._check_width, self._check_height = width, height
        else:
            self._layout_width, self._layout_height = width, height