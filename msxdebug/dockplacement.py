"""Finding where a dragged rectangle snaps onto an existing dock layout."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from msxdebug.docklayout import DockLayout, DockSide, LayoutItem, Rect, SizePolicy

SNAP_DISTANCE = 16
_UNREACHED = 0xFFFFFFFF

# (vertical edge, far side of the entry, resulting side, side that excludes it)
_SIDES = (
    (False, False, DockSide.TOP, DockSide.BOTTOM),
    (False, True, DockSide.BOTTOM, DockSide.TOP),
    (True, False, DockSide.LEFT, DockSide.RIGHT),
    (True, True, DockSide.RIGHT, DockSide.LEFT),
)


@dataclass(frozen=True)
class Placement:
    """Where a rectangle would be docked: final rectangle, entry index and side."""

    rect: Rect
    index: int
    side: DockSide


@dataclass(frozen=True)
class _Span:
    """A rectangle seen along an edge: ``a`` runs along it, ``e`` across it."""

    a0: int
    a1: int
    e0: int
    e1: int


def _span(rect: Rect, vertical: bool) -> _Span:
    if vertical:
        return _Span(rect.top, rect.bottom, rect.left, rect.right)
    return _Span(rect.left, rect.right, rect.top, rect.bottom)


def _to_rect(along: int, edge: int, len_along: int, len_edge: int, vertical: bool) -> Rect:
    if vertical:
        return Rect(edge, along, len_edge, len_along)
    return Rect(along, edge, len_along, len_edge)


def _is_close(a: int, b: int) -> bool:
    return abs(a - b) < SNAP_DISTANCE


def _half(value: int) -> int:
    """Halve, rounding toward zero."""
    return value // 2 if value >= 0 else -((-value) // 2)


def _side_candidates(spans: list[_Span], i: int, r: _Span, vertical: bool,
                     far: bool, resizable: bool) -> Iterator[tuple[int, bool, Rect]]:
    """Yield (distance, must_beat_best, rect) for one side of entry ``i``."""
    d = spans[i]
    r_a_last = r.a1 - 1
    r_e_last = r.e1 - 1
    len_a = r.a1 - r.a0
    len_e = r.e1 - r.e0
    if r.a0 > d.a1 - SNAP_DISTANCE or r_a_last < d.a0 + SNAP_DISTANCE:
        return

    points: set[int] = set()
    if far:
        if not _is_close(r.e0, d.e1):
            return
        gap = abs(r.e0 - d.e1)
        edge = d.e1
        for d2 in spans[:i + 1]:
            if d2.e1 == d.e1:
                points.update((d2.a0, d2.a1))
                for d3 in spans[i + 1:]:
                    if d3.e0 == d2.e1:
                        points.update((d3.a0, d3.a1))
    else:
        if not _is_close(r_e_last, d.e0):
            return
        gap = abs(r_e_last - d.e0)
        edge = d.e0 - len_e
        for d2 in spans[:i + 1]:
            if d2.e0 == d.e0:
                points.update((d2.a0, d2.a1))
                for d3 in spans[i + 1:]:
                    if d3.e1 == d2.e0:
                        points.update((d3.a0, d3.a1))

    base = 8 * gap
    ordered = sorted(points)
    for after, before in zip(ordered, ordered[1:]):
        if _is_close(after, r.a0):
            yield base + abs(after - r.a0), True, _to_rect(after, edge, len_a, len_e, vertical)
        if _is_close(before, r_a_last):
            yield (base + abs(before - r_a_last), True,
                   _to_rect(before - len_a, edge, len_a, len_e, vertical))

    if resizable:
        mid = r.a0 + _half(len_a)
        for ia, high in enumerate(ordered[1:], start=1):
            for low in ordered[:ia]:
                sp_mid = _half(high + low)
                if _is_close(sp_mid, mid):
                    yield (base + abs(sp_mid - mid), False,
                           _to_rect(low, edge, high - low, len_e, vertical))


def find_insert_location(layout: DockLayout, rect: Rect,
                         policy: SizePolicy | None = None) -> Placement | None:
    """Best docking spot for ``rect`` near the layout's edges, or None."""
    policy = policy or SizePolicy()
    entries = layout.entries
    spans = {vertical: [_span(entry.bounds, vertical) for entry in entries]
             for vertical in (False, True)}
    target = {vertical: _span(rect, vertical) for vertical in (False, True)}

    best_distance = _UNREACHED
    best: Placement | None = None
    for i, entry in enumerate(entries):
        earlier = [other.bounds for other in entries[:i]]
        for vertical, far, side, excluded in _SIDES:
            if i != 0 and entry.side is excluded:
                continue
            resizable = not (policy.fixed_height if vertical else policy.fixed_width)
            for distance, bounded, candidate in _side_candidates(
                    spans[vertical], i, target[vertical], vertical, far, resizable):
                if bounded and distance >= best_distance:
                    continue
                if any(candidate.intersects(bounds) for bounds in earlier):
                    continue
                best_distance = distance
                best = Placement(candidate, i + 1, side)
    return best


def dock_at(layout: DockLayout, item: LayoutItem, rect: Rect) -> Placement | None:
    """Dock ``item`` where ``rect`` snaps onto the layout; None if nowhere."""
    placement = find_insert_location(layout, rect, item.policy)
    if placement is None:
        return None
    first = layout.entries[0]
    if placement.side in (DockSide.TOP, DockSide.BOTTOM):
        distance = placement.rect.left - first.left
    else:
        distance = placement.rect.top - first.top
    item.hidden = False
    layout.add_item(item, placement.index, placement.side, distance,
                    placement.rect.width, placement.rect.height)
    return placement