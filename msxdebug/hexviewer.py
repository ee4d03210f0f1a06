"""Model of a hex viewer and editor for an emulator debuggable.

The viewer keeps the geometry of a hex dump (bytes per line, visible lines,
column positions), the marker and editing state, and produces read and write
requests for the emulator. Requests go to the ``send`` callable, or pile up in
``outbox`` when none is given.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Callable

EXTRA_SPACING = 4
WHEEL_STEP = 40

_NAVIGATION = {"Right", "Left", "Up", "Down", "Home", "PageUp", "PageDown", "End"}
_MODIFIERS = {"Shift", "Control", "Meta", "Alt", "AltGr", "CapsLock", "NumLock", "ScrollLock"}
_HEX_DIGITS = "0123456789ABCDEF"


def _tdiv(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


class DisplayMode(enum.Enum):
    """How the number of bytes per line is chosen."""

    FIXED = "fixed"
    FILL_WIDTH = "fill"
    FILL_WIDTH_POWEROF2 = "fill_power_of_2"


@dataclass(frozen=True)
class Metrics:
    """Pixel sizes of the font and frame used to lay out the dump."""

    line_height: int = 16
    char_width: int = 8
    hex_char_width: int = 8
    frame: int = 2
    scrollbar_width: int = 16

    def __post_init__(self) -> None:
        for name in ("line_height", "char_width", "hex_char_width"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.frame < 0 or self.scrollbar_width < 0:
            raise ValueError("frame and scrollbar width must not be negative")


@dataclass(frozen=True)
class HexRequest:
    """Read ``size`` bytes of ``debuggable`` starting at ``offset``."""

    debuggable: str
    offset: int
    size: int


@dataclass(frozen=True)
class HexWrite:
    """Write one byte ``value`` to ``debuggable`` at ``address``."""

    debuggable: str
    address: int
    value: int


def address_length_for(size: int) -> int:
    """Number of hex digits used to print addresses of a debuggable of ``size``."""
    if size <= 0:
        raise ValueError("debuggable size must be positive")
    return 2 * math.ceil(math.log2(size) / 8)


def _hex(value: int, width: int) -> str:
    return format(value, "X").rjust(width, "0")


def _nibble(value: int) -> str:
    return format(value, "04b")


def format_tooltip(address: int, data, address_length: int) -> str:
    """Tooltip text for the byte at ``address``, with the word if one follows."""
    value = data[address]
    lines = [
        f"Address: {_hex(address, address_length)}",
        f"Binary: {_nibble(value >> 4)} {_nibble(value & 0x0F)}",
        f"Decimal: {value}",
    ]
    text = "\n".join(lines)
    if address + 1 < len(data):
        word = value + 256 * data[address + 1]
        nibbles = " ".join(_nibble((word >> shift) & 0xF) for shift in (12, 8, 4, 0))
        text += (f"\n\nWord: {_hex(word, 4)}"
                 f"\nBinary: {nibbles}"
                 f"\nDecimal: {word}")
    return text


class HexViewer:
    """Hex dump view state: layout, scrolling, marker and in-place editing."""

    def __init__(self, send: Callable[[object], None] | None = None,
                 metrics: Metrics | None = None, width: int = 400,
                 height: int = 300) -> None:
        self.metrics = metrics or Metrics()
        self._send = send
        self.outbox: list = []
        self.location_listeners: list[Callable[[int], None]] = []

        self.width = width
        self.height = height
        self.enabled = True
        self.frame_l = self.frame_t = self.frame_b = self.metrics.frame
        self.frame_r = self.frame_l + self.metrics.scrollbar_width

        self.display_mode = DisplayMode.FILL_WIDTH
        self.hor_bytes = 16
        self.visible_lines = 0
        self.partial_bottom_line = False
        self.address_length = 4

        self.debuggable_name = ""
        self.hex_data = bytearray()
        self.previous_data = bytearray()
        self.debuggable_size = 0
        self.top_address = 0
        self.mark_address = 0
        self.waiting_for_data = False
        self.highlight_changes = True
        self.use_marker = False
        self.interactive = False
        self.editable = False
        self.being_edited = False
        self.edited_chars = False
        self.has_focus = False
        self.cursor_position = 0
        self.edit_value = 0
        self._wheel_remainder = 0

        self.scroll_value = 0
        self.scroll_maximum = 0
        self.scroll_page_step = 0
        self.scroll_visible = True
        self.scroll_enabled = True

        self._settings_changed()

    # -- configuration -------------------------------------------------

    def _settings_changed(self) -> None:
        m = self.metrics
        self.line_height = m.line_height
        self.char_width = m.char_width
        self.x_addr = self.frame_l + 8
        self.x_data = self.x_addr + self.address_length * m.hex_char_width + m.char_width
        self.data_width = 3 * m.hex_char_width
        self._set_sizes()

    def set_debuggable(self, name: str, size: int) -> None:
        """Show debuggable ``name`` of ``size`` bytes; size 0 clears the view."""
        if size < 0:
            raise ValueError("debuggable size must not be negative")
        self.debuggable_size = size
        self.hex_data = bytearray(size)
        self.previous_data = bytearray(size)
        if size:
            self.debuggable_name = name
            self.address_length = address_length_for(size)
            self.top_address = 0
            self.mark_address = 0
            self._settings_changed()
        else:
            self.debuggable_name = ""

    def set_use_marker(self, enabled: bool) -> None:
        self.use_marker = enabled
        if enabled:
            self.mark_address = self.top_address

    def set_editable(self, enabled: bool) -> None:
        self.editable = enabled
        self.set_use_marker(True)

    def set_interactive(self, enabled: bool) -> None:
        self.interactive = enabled
        self.scroll_enabled = enabled

    def set_display_mode(self, mode: DisplayMode) -> None:
        self.display_mode = mode
        self._set_sizes()

    def set_display_width(self, width: int) -> None:
        """Show exactly ``width`` bytes per line."""
        if width <= 0:
            raise ValueError("display width must be positive")
        self.display_mode = DisplayMode.FIXED
        self.hor_bytes = width
        self._set_sizes()

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._set_sizes()

    def _set_sizes(self) -> None:
        inner = self.height - self.frame_t - self.frame_b
        self.visible_lines = _tdiv(inner, self.line_height)
        self.partial_bottom_line = inner != self.line_height * self.visible_lines
        self.frame_r = self.frame_l
        sbw_full = self.metrics.scrollbar_width

        if self.display_mode is not DisplayMode.FIXED:
            sbw = sbw_full
            hor = hb2 = 1
            step = self.data_width + self.char_width
            w = (self.width - self.frame_l - self.frame_r - self.x_data
                 - self.data_width - 2 * self.char_width - 8)
            while w - sbw >= step:
                hor += 1
                if hor == 2 * hb2:
                    hb2 = hor
                w -= step
                if hor & 3 == 0:
                    w -= EXTRA_SPACING
                if hor & 7 == 0:
                    w -= EXTRA_SPACING
                if hor * self.visible_lines >= self.debuggable_size:
                    sbw = 0
            self.hor_bytes = hb2 if self.display_mode is DisplayMode.FILL_WIDTH_POWEROF2 else hor

        hor = self.hor_bytes
        if hor * self.visible_lines < self.debuggable_size:
            max_line = max(-(-self.debuggable_size // hor) - self.visible_lines, 0)
            self.scroll_maximum = max_line
            self.scroll_page_step = self.visible_lines
            self.scroll_value = min(self.scroll_value, max_line)
            self.frame_r += sbw_full
            self.scroll_visible = True
        else:
            self.scroll_visible = False
            self.top_address = 0
            self.mark_address = 0

        self.right_value_pos = self.x_data + hor * self.data_width
        self.x_char = (self.right_value_pos + self.char_width
                       + EXTRA_SPACING * (hor // 4 + hor // 8))
        self.right_char_pos = self.x_char + hor * self.char_width

        if self.enabled:
            self.set_top_location(hor * _tdiv(self.top_address, hor))

    # -- communication -------------------------------------------------

    def _dispatch(self, request) -> None:
        if self._send is not None:
            self._send(request)
        else:
            self.outbox.append(request)

    def _emit_location(self, addr: int) -> None:
        for listener in self.location_listeners:
            listener(addr)

    def refresh(self) -> HexRequest:
        """Request the bytes currently on screen."""
        size = self.hor_bytes * (self.visible_lines + self.partial_bottom_line)
        size = max(min(size, self.debuggable_size - self.top_address), 0)
        request = HexRequest(self.debuggable_name, self.top_address, size)
        self._dispatch(request)
        self.waiting_for_data = True
        return request

    def receive(self, request: HexRequest, data: bytes) -> None:
        """Store the reply to ``request``."""
        if len(data) != request.size:
            raise ValueError(f"expected {request.size} bytes, got {len(data)}")
        self.hex_data[request.offset:request.offset + request.size] = data
        self.cancel(request)

    def cancel(self, request: HexRequest) -> None:
        """Forget an outstanding request and resync the scroll bar."""
        self.waiting_for_data = False
        line = _tdiv(self.top_address, self.hor_bytes)
        if line != self.scroll_value:
            self._set_scroll_value(line)

    # -- scrolling and location ----------------------------------------

    def _set_scroll_value(self, value: int) -> None:
        value = max(0, min(value, self.scroll_maximum))
        if value != self.scroll_value:
            self.scroll_value = value
            self.scroll_bar_changed(value)

    def scroll_bar_changed(self, line: int) -> None:
        """The scroll bar moved to ``line``."""
        start = line * self.hor_bytes
        if start == self.top_address:
            return
        if not self.use_marker:
            self.set_top_location(start)
            self._emit_location(start)
            return
        size = self.hor_bytes * self.visible_lines
        self.top_address = start
        if start > self.mark_address or start + size - 1 < self.mark_address:
            self.mark_address = (self.mark_address % self.hor_bytes
                                 + (size - self.hor_bytes if start < self.mark_address else 0))
            self.mark_address += start
            self._emit_location(self.mark_address)
        self.refresh()

    def set_location(self, addr: int) -> None:
        """Move the marker (or the top line, without a marker) to ``addr``."""
        if not self.use_marker:
            self.set_top_location(addr)
            return
        if addr != self.mark_address:
            self._emit_location(addr)
        self.mark_address = addr
        size = self.hor_bytes * self.visible_lines
        if addr < self.top_address or addr >= self.top_address + size:
            self.set_top_location(addr)
        self.refresh()

    def set_top_location(self, addr: int) -> None:
        """Scroll so the line holding ``addr`` is on top."""
        if not self.debuggable_name:
            return
        start = self.hor_bytes * _tdiv(addr, self.hor_bytes)
        if not self.waiting_for_data or start != self.top_address:
            self.top_address = start
            self.refresh()

    def wheel(self, delta: int) -> None:
        """Mouse wheel turned by ``delta`` eighths of a degree."""
        self._wheel_remainder += delta
        steps = _tdiv(self._wheel_remainder, WHEEL_STEP)
        self._wheel_remainder -= steps * WHEEL_STEP
        if steps:
            self._set_scroll_value(self.scroll_value - steps)

    # -- pointer -------------------------------------------------------

    def offset_at(self, x: int, y: int) -> int | None:
        """Byte offset from the top address under pixel (x, y), or None."""
        offset = -1
        if self.x_data <= x < self.right_value_pos:
            offset = 0
            x -= self.x_data
            while x > 4 * self.data_width:
                offset += 4
                x -= 4 * self.data_width + EXTRA_SPACING
                if offset % 8 == 0:
                    x -= EXTRA_SPACING
            offset += _tdiv(x, self.data_width)
        elif self.x_char <= x < self.right_char_pos:
            offset = _tdiv(x - self.x_char, self.char_width)
        y_max = self.frame_t + (self.visible_lines + self.partial_bottom_line) * self.line_height
        if offset >= 0 and y < y_max:
            offset += self.hor_bytes * _tdiv(y - self.frame_t, self.line_height)
        return offset if offset >= 0 else None

    def tooltip(self, x: int, y: int) -> str | None:
        offset = self.offset_at(x, y)
        if offset is None or self.top_address + offset >= self.debuggable_size:
            return None
        return format_tooltip(self.top_address + offset, self.hex_data, self.address_length)

    def click(self, x: int, y: int) -> None:
        """Left click at pixel (x, y)."""
        if not self.interactive:
            return
        offset = self.offset_at(x, y)
        if offset is None:
            return
        addr = self.top_address + offset
        if self.use_marker and self.mark_address != addr:
            self.set_location(addr)
        else:
            if not self.use_marker:
                self.mark_address = addr
            self.edit_value = 0
            self.cursor_position = 0
            self.being_edited = self.editable
        self.edited_chars = x >= self.x_char

    # -- keyboard ------------------------------------------------------

    def key_press(self, key: str, text: str = "") -> bool:
        """Handle key ``key`` (typed as ``text``); returns whether it was used."""
        if (not self.being_edited and not self.use_marker) or not self.interactive:
            return False

        set_value = False
        new_address = self.mark_address
        digit = key.upper() if len(key) == 1 else ""
        page = self.hor_bytes * self.visible_lines

        if not self.edited_chars and digit and digit in _HEX_DIGITS:
            value = int(digit, 16)
            if self.being_edited:
                self.edit_value = (self.edit_value << 4) + value
                self.cursor_position += 1
                if self.cursor_position == 2:
                    set_value = True
                    new_address += 1
            else:
                self.edit_value = value
                self.being_edited = True
                self.cursor_position = 1
        elif self.use_marker and key in _NAVIGATION:
            set_value = self.being_edited and not self.edited_chars
            if key == "Right":
                new_address += 1
            elif key == "Left":
                new_address -= 1
            elif key == "Up":
                new_address -= self.hor_bytes
            elif key == "Down":
                new_address += self.hor_bytes
            elif key == "Home":
                new_address = 0
            elif key == "PageUp":
                self.top_address -= page
                new_address -= page
            elif key == "PageDown":
                self.top_address += page
                new_address += page
            else:
                new_address = self.debuggable_size - 1
            self.cursor_position = 0
        elif self.use_marker and key == "Backspace":
            self.edited_chars = not self.edited_chars
        elif key in ("Return", "Enter"):
            if self.being_edited:
                set_value = True
            else:
                self.cursor_position = 0
            if self.edited_chars:
                self.edit_value = self.previous_data[self.mark_address]
            new_address += 1
        elif key in _MODIFIERS:
            pass
        elif key == "Escape":
            self.being_edited = False
            return True
        elif self.edited_chars:
            self.edit_value = text[0].encode("latin-1", "replace")[0] if text else 0
            set_value = True
            new_address += 1
        else:
            return False

        if set_value:
            value = self.edit_value & 0xFF
            self.previous_data[self.mark_address] = value
            self._dispatch(HexWrite(self.debuggable_name, self.mark_address, value))
            self.edit_value = 0
            self.cursor_position = 0
            self.being_edited = self.edited_chars
            self.refresh()

        if (self.edited_chars or self.use_marker) and self.mark_address != new_address:
            size = self.debuggable_size
            if new_address < 0:
                new_address += size
            if new_address >= size:
                new_address -= size
            if self.top_address < 0:
                self.top_address += size
            if self.top_address >= size:
                self.top_address -= size
            bottom = self.top_address + page
            if bottom <= new_address <= bottom + self.hor_bytes:
                self.top_address += self.hor_bytes
            if self.use_marker:
                self.set_location(new_address)
            else:
                self.mark_address = new_address
                self.refresh()
        return True