"""Session bookkeeping: user command buttons, recent files and debuggables."""

from __future__ import annotations

import base64
import binascii
import os
import string
from dataclasses import dataclass
from typing import Iterable

MAX_RECENT_FILES = 5
WINDOW_TITLE_FORMAT = "openMSX debugger [{name}{marker}]"
UNNAMED_SESSION = "unnamed session"

_B64_ALPHABET = frozenset(string.ascii_letters + string.digits + "+/")


@dataclass
class CommandButton:
    """A user-defined toolbar button that sends a Tcl script when pressed."""

    name: str
    description: str = ""
    source: str = ""
    icon: str = ""
    index: int = 0


def _encode(text: str) -> bytes:
    return base64.b64encode(text.encode("utf-8"))


def _decode(field: bytes) -> str:
    """Decode base64 leniently: stray characters are skipped, padding is optional."""
    cleaned = bytes(c for c in field if chr(c) in _B64_ALPHABET)
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += b"=" * (-len(cleaned) % 4)
    try:
        raw = base64.b64decode(cleaned)
    except binascii.Error:
        raw = b""
    return raw.decode("utf-8", errors="replace")


def save_commands(commands: Iterable[CommandButton]) -> bytes:
    """Serialise buttons as ``name;description;source;icon`` joined by ``:``.

    Every field is UTF-8 text encoded as base64.
    """
    return b":".join(
        b";".join(_encode(part) for part in
                  (command.name, command.description, command.source, command.icon))
        for command in commands
    )


def restore_commands(data: bytes) -> list[CommandButton]:
    """Parse the output of :func:`save_commands`; malformed records are skipped."""
    if isinstance(data, str):
        data = data.encode("ascii", errors="ignore")
    commands: list[CommandButton] = []
    for record in data.split(b":"):
        fields = record.split(b";")
        if len(fields) < 4:
            continue
        commands.append(CommandButton(
            name=_decode(fields[0]),
            description=_decode(fields[1]),
            source=_decode(fields[2]),
            icon=_decode(fields[3]),
            index=len(commands),
        ))
    return commands


class RecentFiles:
    """Most recently opened session files, newest first."""

    def __init__(self, files: Iterable[str] = (), maximum: int = MAX_RECENT_FILES) -> None:
        if maximum <= 0:
            raise ValueError("maximum must be positive")
        self.maximum = maximum
        self.files: list[str] = list(files)

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self):
        return iter(self.files)

    def add(self, path: str) -> None:
        """Move ``path`` to the front, dropping the oldest beyond the maximum."""
        self.files = [path] + [f for f in self.files if f != path]
        del self.files[self.maximum:]

    def remove(self, path: str) -> None:
        self.files = [f for f in self.files if f != path]

    @property
    def separator_visible(self) -> bool:
        return bool(self.files)

    def menu_entries(self) -> list[tuple[str, str]]:
        """(menu text, path) for the entries that are shown in the menu."""
        return [(f"&{number} {os.path.basename(path)}", path)
                for number, path in enumerate(self.files[:self.maximum], start=1)]


def parse_debuggables(text: str) -> dict[str, int]:
    """Names from a ``debug list`` reply, sorted, each with size 0.

    Braced names that contain spaces are kept whole, braces included.
    """
    words = [word for word in text.split(" ") if word]
    names: list[str] = []
    it = iter(words)
    for word in it:
        name = word
        if name.startswith("{"):
            while not name.endswith("}"):
                try:
                    name += " " + next(it)
                except StopIteration:
                    raise ValueError(f"unterminated debuggable name: {name!r}") from None
        names.append(name)
    return {name: 0 for name in sorted(set(names))}


def window_title(filename: str | None, modified: bool) -> str:
    """Main window title for a session file (None when unsaved)."""
    return WINDOW_TITLE_FORMAT.format(name=filename or UNNAMED_SESSION,
                                      marker="*" if modified else "")