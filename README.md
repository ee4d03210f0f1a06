# msxdebug

Building blocks for a graphical debugger that talks to an MSX emulator,
independent of any GUI toolkit. The package models the parts of a debugger
window that carry logic, so they can be driven and tested without a screen.
It uses only the Python standard library and supports Python 3.10 and later.

## Modules

- `msxdebug.docklayout` – `DockLayout` arranges `LayoutItem`s around the
  first (central, resizable) item, each docked on a `DockSide` at a distance.
  It reports `minimum_size()`, `maximum_size()` and `size_hint()`, resizes via
  `set_geometry(width, height)`, gives each item's `bounds()` as a `Rect`, and
  writes its arrangement as text lines with `config()`.
- `msxdebug.dockplacement` – `find_insert_location(layout, rect, policy)`
  returns the `Placement` where a dragged rectangle snaps onto the layout
  (within 16 pixels of an edge), or `None`; `dock_at(layout, item, rect)`
  docks the item there.
- `msxdebug.dockwidget` – `DockableWidget`, a titled panel that can be
  docked or floating, closed or destroyed, and dragged with
  `mouse_press` / `mouse_move` / `mouse_release` to dock or undock it.
- `msxdebug.dockmanager` – `DockArea` (a layout placed at a screen origin)
  and `DockManager`, which keeps the areas, the widgets and which area each
  docked widget lives in; `find(widget_id)` looks a widget up by id.
- `msxdebug.flags` – `describe_flags(flags, changed)` returns one `FlagRow`
  per bit of the Z80 flag register (bit 7 first) with its name, value,
  whether it changed and its meaning (`(Z)`/`(NZ)`, `(PE)`/`(PO)`, ...);
  `FlagsView` tracks which bits changed between updates.
- `msxdebug.interactive_button` – `InteractiveButton` for one bit of a VDP
  register, named like `reg_8_3`; `parse_register_bit` extracts
  (register, bit) and `button_color` picks its `ButtonColor`.
- `msxdebug.hexviewer` – `HexViewer`, a hex dump viewer and editor model:
  bytes per line (`DisplayMode`), scrolling, marker, keyboard and mouse
  editing and tooltips (`format_tooltip`). It produces `HexRequest` (read)
  and `HexWrite` (one-byte write) objects, passed to a `send` callable or
  collected in `outbox`; replies are delivered with `receive(request, data)`.
- `msxdebug.session` – `save_commands` / `restore_commands` serialise user
  `CommandButton`s (base64 fields separated by `;`, records by `:`);
  `RecentFiles` keeps the five newest session files; `parse_debuggables`
  reads a `debug list` reply; `window_title` builds the main window title.
- `msxdebug.workspace` – saving and restoring the panel arrangement as text
  lines: `LayoutEntry.parse`, `default_layout(sizes)`,
  `apply_layout(manager, entries)` and `save_layout(manager)`.
- `msxdebug.controller` – `DebuggerController` tracks connection and
  run/break state (`RunState`), which actions are enabled, and issues the
  emulator's Tcl commands (pause, reset, break, run, step, step over/out/back,
  run to). `address_slot(layout, addr)` resolves the slot, subslot and mapper
  segment of an address from a `MemoryLayout`; `DisasmSync` waits for both
  the slot and program counter updates before moving the disassembly.

## Examples

```python
from msxdebug.flags import describe_flags

for row in describe_flags(0b0100_0001):
    print(row.name, row.value, row.description)
```

```python
from msxdebug.hexviewer import HexViewer

viewer = HexViewer()
viewer.set_debuggable("memory", 0x10000)
request = viewer.outbox[-1]            # HexRequest for the visible bytes
viewer.receive(request, bytes(request.size))
```

```python
from msxdebug.controller import DebuggerController, RunState

ctl = DebuggerController()
ctl.init_connection()
command, on_reply, _ = ctl.sent[1]     # "debug breaked"
on_reply("1")
assert ctl.run_state is RunState.BREAK
```

## What it does not do

- It draws nothing: there are no windows, widgets or painting, only the state
  and geometry a toolkit would display.
- It does not open a connection to the emulator. Commands and requests are
  handed to a callable you supply (or collected in `sent` / `outbox`), and
  replies must be passed back in by the caller.
- It has no disassembler, symbol table, breakpoint list parsing or session
  file storage; `reload_breakpoints` only hands the raw reply to listeners.
- It provides no command-line program.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```