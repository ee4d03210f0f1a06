import pytest

from msxdebug.docklayout import (
    HIDDEN_POSITION,
    DockLayout,
    DockSide,
    LayoutItem,
    Rect,
    SizePolicy,
)


def make(widget_id, width, height, **kwargs):
    return LayoutItem(widget_id=widget_id, hint_width=width, hint_height=height, **kwargs)


@pytest.fixture
def centre():
    return make("A", 100, 80, min_width=50, min_height=20, max_width=200, max_height=160)


def test_rect_intersects_overlap():
    assert Rect(0, 0, 10, 10).intersects(Rect(5, 5, 10, 10))


def test_rect_touching_edges_do_not_intersect():
    assert not Rect(0, 0, 10, 10).intersects(Rect(10, 0, 10, 10))
    assert not Rect(0, 0, 10, 10).intersects(Rect(0, 10, 10, 10))


def test_rect_empty_never_intersects():
    assert not Rect(0, 0, 0, 10).intersects(Rect(0, 0, 10, 10))
    assert not Rect(0, 0, 10, 10).intersects(Rect(2, 2, 5, 0))


def test_rect_moved_to_keeps_size():
    r = Rect(1, 2, 30, 40).moved_to(7, 9)
    assert r == Rect(7, 9, 30, 40)
    assert (r.right, r.bottom) == (7 + 30, 9 + 40)


def test_first_item_takes_hint_size(centre):
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    assert layout.size_hint() == (centre.hint_width, centre.hint_height)
    assert layout.bounds(centre) == Rect(0, 0, centre.hint_width, centre.hint_height)


def test_single_item_limits_follow_item(centre):
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    assert layout.minimum_size() == (centre.min_width, centre.min_height)
    assert layout.maximum_size() == (centre.max_width, centre.max_height)


def test_right_docking(centre):
    side = make("B", 30, 40)
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_widget(side, DockSide.RIGHT, 0)
    assert layout.bounds(side) == Rect(centre.hint_width, 0, 30, 40)
    assert layout.size_hint() == (centre.hint_width + side.hint_width, centre.hint_height)


def test_left_docking_shifts_centre(centre):
    side = make("B", 30, 80)
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_widget(side, DockSide.LEFT, 0)
    assert layout.bounds(side) == Rect(0, 0, 30, 80)
    assert layout.bounds(centre).left == side.hint_width


def test_top_docking_shifts_centre(centre):
    side = make("B", 100, 20)
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_widget(side, DockSide.TOP, 0)
    assert layout.bounds(centre).top == side.hint_height
    assert layout.bounds(side).bottom == layout.bounds(centre).top


def test_bottom_docking_beyond_width_sits_beside(centre):
    side = make("B", 30, 40)
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_widget(side, DockSide.BOTTOM, centre.hint_width)
    assert layout.bounds(side) == Rect(centre.hint_width, 0, 30, 40)


def test_later_items_pushed_past_earlier_ones(centre):
    first = make("B", 30, 40)
    second = make("C", 30, 40)
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_widget(first, DockSide.RIGHT, 0)
    layout.add_widget(second, DockSide.RIGHT, 0)
    assert layout.bounds(second).left == layout.bounds(first).right
    assert not layout.bounds(second).intersects(layout.bounds(first))


def test_hidden_item_is_excluded(centre):
    side = make("B", 30, 40)
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_widget(side, DockSide.RIGHT, 0)
    side.hidden = True
    layout.changed()
    assert layout.size_hint() == (centre.hint_width, centre.hint_height)
    assert layout.bounds(side).left == HIDDEN_POSITION


def test_minimum_height_covers_docked_item(centre):
    side = make("B", 30, 40, policy=SizePolicy(fixed_width=True, fixed_height=True))
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_widget(side, DockSide.RIGHT, 0)
    assert layout.minimum_size() == (centre.min_width + side.hint_width, side.hint_height)


def test_set_geometry_resizes_centre(centre):
    side = make("B", 30, 40)
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_widget(side, DockSide.RIGHT, 0)
    target = centre.hint_width + side.hint_width + 50
    layout.set_geometry(target, centre.hint_height)
    assert layout.size_hint()[0] == target
    assert layout.bounds(side).left == layout.bounds(centre).right


def test_set_geometry_clamps_to_maximum(centre):
    side = make("B", 30, 40)
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_widget(side, DockSide.RIGHT, 0)
    layout.set_geometry(10_000, 10_000)
    assert layout.size_hint() == layout.maximum_size()
    assert layout.bounds(centre).width == centre.max_width


def test_config_lines(centre):
    side = make("B", 30, 40)
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_widget(side, DockSide.BOTTOM, 5)
    assert layout.config() == ["A D V R 0 100 80", "B D V B 5 -1 -1"]
    side.hidden = True
    assert layout.config()[1] == "B D H B 5 -1 -1"


def test_explicit_width_ignored_for_fixed_policy(centre):
    fixed = make("B", 30, 40, policy=SizePolicy(fixed_width=True))
    free = make("C", 30, 40)
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_widget(fixed, DockSide.RIGHT, 0, 50, -1)
    layout.add_widget(free, DockSide.RIGHT, 0, 50, -1)
    assert layout.config()[1] == "B D V R 0 -1 -1"
    assert layout.config()[2] == "C D V R 0 50 -1"


def test_item_access_and_removal(centre):
    side = make("B", 30, 40)
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    layout.add_item(side, 0, DockSide.LEFT, 0)
    assert len(layout) == 2
    assert layout.item_at(0) is side
    assert layout.item_at(5) is None
    assert layout.take_at(-1) is None
    assert layout.remove_item(side) is True
    assert layout.remove_item(side) is False
    assert len(layout) == 1


def test_duplicate_item_rejected(centre):
    layout = DockLayout()
    layout.add_widget(centre, DockSide.RIGHT, 0)
    with pytest.raises(ValueError):
        layout.add_widget(centre, DockSide.LEFT, 0)


def test_bounds_of_unknown_item_raises(centre):
    layout = DockLayout()
    with pytest.raises(ValueError):
        layout.bounds(centre)