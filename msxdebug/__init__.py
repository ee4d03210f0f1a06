"""Dock layout, hex viewer, flag view, session and controller logic for an MSX emulator debugger."""

__version__ = "0.1.0"

__all__ = [
    "controller",
    "docklayout",
    "dockmanager",
    "dockplacement",
    "dockwidget",
    "flags",
    "hexviewer",
    "interactive_button",
    "session",
    "workspace",
]