import pytest

from msxdebug.docklayout import DockSide, Rect
from msxdebug.dockmanager import DockArea, DockManager
from msxdebug.dockwidget import DockableWidget


def setup(origin=(0, 0)):
    manager = DockManager()
    area = DockArea(origin)
    manager.add_dock_area(area)
    centre = DockableWidget(manager, "CODE", hint_width=100, hint_height=100)
    return manager, area, centre


def test_add_dock_area_once():
    manager, area, _ = setup()
    manager.add_dock_area(area)
    assert manager.areas == [area]
    assert manager.dock_area_index(area) == 0
    with pytest.raises(ValueError):
        manager.dock_area_index(DockArea())


def test_widgets_attach_and_find():
    manager, _, centre = setup()
    other = DockableWidget(manager, "MEM")
    assert manager.managed_widgets() == [centre, other]
    assert manager.find("MEM") is other
    assert manager.find("NONE") is None
    manager.detach_widget(other)
    assert manager.find("MEM") is None


def test_insert_widget_out_of_range_ignored():
    manager, _, centre = setup()
    manager.insert_widget(centre, 3, DockSide.RIGHT, 0)
    assert manager.config(0) == []


def test_insert_widget_config():
    manager, _, centre = setup()
    manager.insert_widget(centre, 0, DockSide.RIGHT, 0)
    assert manager.config(0) == ["CODE D V R 0 100 100"]


def test_visibility_changed_relayouts():
    manager, area, centre = setup()
    side = DockableWidget(manager, "REGS", hint_width=40, hint_height=50)
    manager.insert_widget(centre, 0, DockSide.RIGHT, 0)
    manager.insert_widget(side, 0, DockSide.RIGHT, 0)
    assert area.layout.size_hint()[0] == 140
    side.hide()
    manager.visibility_changed(side)
    assert area.layout.size_hint()[0] == centre.hint_width
    assert manager.config(0)[1].startswith("REGS D H R")


def test_insert_location_without_widgets():
    manager = DockManager()
    manager.add_dock_area(DockArea())
    assert manager.insert_location(Rect(0, 0, 10, 10)) is None


def test_insert_location_uses_global_coordinates():
    manager, _, centre = setup(origin=(10, 20))
    manager.insert_widget(centre, 0, DockSide.RIGHT, 0)
    found = manager.insert_location(Rect(10, 122, 50, 30))
    assert found.top == 20 + centre.hint_height
    assert found.left == 10


def test_drag_floating_widget_docks_it():
    manager, area, centre = setup(origin=(10, 20))
    manager.insert_widget(centre, 0, DockSide.RIGHT, 0)
    panel = DockableWidget(manager, "MEM", hint_width=50, hint_height=30)
    panel.set_floating(True)
    panel.mouse_press((0, 0), (0, 0))
    panel.mouse_release((10, 122))
    assert panel.floating is False
    assert len(area.layout) == 2
    assert area.layout.bounds(panel).top == area.layout.bounds(centre).bottom


def test_undock_removes_from_layout():
    manager, area, centre = setup()
    manager.insert_widget(centre, 0, DockSide.RIGHT, 0)
    panel = DockableWidget(manager, "MEM", hint_width=50, hint_height=30)
    assert manager.dock_widget(panel, Rect(0, 102, 50, 30)) is not None
    assert len(area.layout) == 2
    manager.undock_widget(panel)
    assert len(area.layout) == 1
    assert area.layout.item_at(0) is centre