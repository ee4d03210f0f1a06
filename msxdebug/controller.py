"""Connection and execution control of the debugger, independent of any GUI.

The controller sends Tcl commands to the emulator through a ``send`` callable
taking ``(command, on_reply, on_error)``. Without one, every command is kept
in ``sent`` so replies can be delivered later by calling the stored callbacks.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable, Optional

from msxdebug.session import parse_debuggables

Reply = Optional[Callable[[str], None]]

_ACTIONS = (
    "copy_code", "connect", "disconnect", "pause", "reboot",
    "break", "run", "step", "step_over", "step_out", "step_back", "run_to",
    "breakpoint_toggle", "breakpoint_add", "commands",
)
_EXECUTE_ACTIONS = ("run", "step", "step_over", "step_out", "step_back", "run_to")

_HELPER_PROCS = (
    "proc debug_bin2hex { input } {\n"
    "  set result \"\"\n"
    "  foreach i [split $input {}] {\n"
    "    append result [format %02X [scan $i %c]] \"\"\n"
    "  }\n"
    "  return $result\n"
    "}\n",
    "proc debug_hex2bin { input } {\n"
    "  set result \"\"\n"
    "  foreach {h l} [split $input {}] {\n"
    "    append result [binary format H2 $h$l] \"\"\n"
    "  }\n"
    "  return $result\n"
    "}\n",
    "proc debug_memmapper { } {\n"
    "  set result \"\"\n"
    "  for { set page 0 } { $page &lt; 4 } { incr page } {\n"
    "    set tmp [get_selected_slot $page]\n"
    "    append result [lindex $tmp 0] [lindex $tmp 1] \"\\n\"\n"
    "    if { [lsearch [debug list] \"MapperIO\"] != -1} {\n"
    "      append result [debug read \"MapperIO\" $page] \"\\n\"\n"
    "    } else {\n"
    "      append result \"0\\n\"\n"
    "    }\n"
    "  }\n"
    "  for { set ps 0 } { $ps &lt; 4 } { incr ps } {\n"
    "    if [machine_info issubslotted $ps] {\n"
    "      append result \"1\\n\"\n"
    "      for { set ss 0 } { $ss &lt; 4 } { incr ss } {\n"
    "        append result [get_mapper_size $ps $ss] \"\\n\"\n"
    "      }\n"
    "    } else {\n"
    "      append result \"0\\n\"\n"
    "      append result [get_mapper_size $ps 0] \"\\n\"\n"
    "    }\n"
    "  }\n"
    "  for { set page 0 } { $page &lt; 4 } { incr page } {\n"
    "    set tmp [get_selected_slot $page]\n"
    "    set ss [lindex $tmp 1]\n"
    "    if { $ss == \"X\" } { set ss 0 }\n"
    "    set device_list [machine_info slot [lindex $tmp 0] $ss $page]\n"
    "    set name \"[lindex $device_list 0] romblocks\"\n"
    "    if { [lsearch [debug list] $name] != -1} {\n"
    "      append result \"[debug read $name [expr {$page * 0x4000}] ]\\n\"\n"
    "      append result \"[debug read $name [expr {$page * 0x4000 + 0x2000}] ]\\n\"\n"
    "    } else {\n"
    "      append result \"X\\nX\\n\"\n"
    "    }\n"
    "  }\n"
    "  return $result\n"
    "}\n",
    "proc debug_list_all_breaks { } {\n"
    "  set result [debug list_bp]\n"
    "  append result [debug list_watchpoints]\n"
    "  append result [debug list_conditions]\n"
    "  return $result\n"
    "}\n",
    "proc debug_check_debuggables { debuggables } {\n"
    "  set all_debuggables [debug list]\n"
    "  lmap x $debuggables {expr {[lsearch $all_debuggables $x] >= 0}}\n"
    "}\n",
)


@dataclass
class MemoryLayout:
    """Slot selection and mapper state of the emulated machine's 4 pages."""

    primary_slot: list[int] = field(default_factory=lambda: [0] * 4)
    secondary_slot: list[int] = field(default_factory=lambda: [-1] * 4)
    mapper_segment: list[int] = field(default_factory=lambda: [0] * 4)
    rom_block: list[int] = field(default_factory=lambda: [-1] * 8)
    mapper_size: list[list[int]] = field(
        default_factory=lambda: [[0] * 4 for _ in range(4)])


@dataclass(frozen=True)
class AddressSlot:
    """Primary slot, optional secondary slot and optional segment of an address."""

    primary: int
    secondary: Optional[int]
    segment: Optional[int]


def address_slot(layout: MemoryLayout, addr: int) -> AddressSlot:
    """Where ``addr`` currently lives: slot, subslot and (rom) mapper segment."""
    if not 0 <= addr <= 0xFFFF:
        raise ValueError(f"address out of range: {addr}")
    page = (addr & 0xC000) >> 14
    ps = layout.primary_slot[page] & 0xFF
    raw_ss = layout.secondary_slot[page]
    ss = raw_ss & 0xFF if raw_ss >= 0 else None
    if ss is not None and layout.mapper_size[ps][ss] > 0:
        segment: Optional[int] = layout.mapper_segment[page] & 0xFF
    else:
        block = layout.rom_block[2 * page + ((addr & 0x2000) >> 13)]
        segment = block & 0xFF if block >= 0 else None
    return AddressSlot(ps, ss, segment)


class DisasmStatus(enum.Enum):
    """Progress of gathering slot and program counter updates after a break."""

    RESET = 0
    SLOTS_CHECKED = 1
    PC_CHANGED = 2
    SLOTS_CHANGED = 3


class DisasmSync:
    """Waits for both the slot update and the new PC before moving the disassembly.

    ``on_program_counter(address, reload)`` is called when the view must move.
    """

    def __init__(self, on_program_counter: Optional[Callable[[int, bool], None]] = None) -> None:
        self.status = DisasmStatus.RESET
        self.address = 0
        self.on_program_counter = on_program_counter

    def _move(self, address: int, reload: bool) -> tuple[int, bool]:
        if self.on_program_counter is not None:
            self.on_program_counter(address, reload)
        return address, reload

    def slots_updated(self, changed: bool) -> Optional[tuple[int, bool]]:
        """Slots were checked; returns (address, reload) if the view moved."""
        if self.status is DisasmStatus.PC_CHANGED:
            result = self._move(self.address, changed)
            self.status = DisasmStatus.RESET
            return result
        self.status = DisasmStatus.SLOTS_CHANGED if changed else DisasmStatus.SLOTS_CHECKED
        return None

    def pc_changed(self, address: int) -> Optional[tuple[int, bool]]:
        """The PC is known; returns (address, reload) if the view moved."""
        if self.status is not DisasmStatus.RESET:
            return self._move(address, self.status is DisasmStatus.SLOTS_CHANGED)
        self.status = DisasmStatus.PC_CHANGED
        self.address = address
        return None


class RunState(enum.Enum):
    """Whether the emulator is unreachable, running or halted in the debugger."""

    DISCONNECTED = "disconnected"
    RUNNING = "running"
    BREAK = "break"


class DebuggerController:
    """Tracks connection and run state and issues emulator commands."""

    def __init__(self, send: Optional[Callable[[str, Reply, Reply], None]] = None,
                 read_registers: Optional[Callable[[], None]] = None) -> None:
        self._send = send
        self._read_registers = read_registers
        self.sent: list[tuple[str, Reply, Reply]] = []
        self.actions: dict[str, bool] = {name: False for name in _ACTIONS}
        self.run_state = RunState.DISCONNECTED
        self.paused = False
        self.widgets_enabled = False
        self.merge_breakpoints = False
        self.debug_updates_unavailable = False
        self.register_requests = 0
        self.debuggables: dict[str, int] = {}
        self.disasm = DisasmSync()
        self.connected_listeners: list[Callable[[], None]] = []
        self.breakpoint_listeners: list[Callable[[str, bool], None]] = []
        self.debuggables_listeners: list[Callable[[dict[str, int]], None]] = []
        self.connection_closed()

    # -- plumbing -------------------------------------------------------

    def _command(self, text: str, on_reply: Reply = None, on_error: Reply = None) -> None:
        if self._send is not None:
            self._send(text, on_reply, on_error)
        else:
            self.sent.append((text, on_reply, on_error))

    def _enable(self, names, enabled: bool) -> None:
        for name in names:
            self.actions[name] = enabled

    def _enter_run_state(self) -> None:
        self.run_state = RunState.RUNNING
        self._enable(("break",), True)
        self._enable(_EXECUTE_ACTIONS, False)

    def _enter_break_state(self) -> None:
        self.run_state = RunState.BREAK
        self._enable(("break",), False)
        self._enable(_EXECUTE_ACTIONS, True)

    def _break_occurred(self) -> None:
        self._enter_break_state()
        self._update_data()

    def _update_data(self) -> None:
        self.reload_breakpoints(self.merge_breakpoints)
        self.merge_breakpoints = False
        self.register_requests += 1
        if self._read_registers is not None:
            self._read_registers()

    def reload_breakpoints(self, merge: bool = False) -> None:
        """Ask for every break-, watch- and condition point."""
        def on_reply(message: str) -> None:
            for listener in self.breakpoint_listeners:
                listener(message, merge)
        self._command("debug_list_all_breaks", on_reply)

    # -- connection -----------------------------------------------------

    def init_connection(self) -> None:
        """The connection is up: query the emulator and install helper procs."""
        self.actions["copy_code"] = True
        self.actions["connect"] = False
        self.actions["disconnect"] = True

        self._command("set pause", self.pause_reply)
        self._command("debug breaked",
                      lambda message: self.finalize_connection(message.strip() == "1"))
        self._command("openmsx_update enable status")

        def on_debug_error(_message: str) -> None:
            self.debug_updates_unavailable = True
        self._command("openmsx_update enable debug", None, on_debug_error)
        self._command("debug list", self.set_debuggables)
        for proc in _HELPER_PROCS:
            self._command(proc)

    def connection_closed(self) -> None:
        """Disable everything that needs a running emulator."""
        self._enable(_ACTIONS, False)
        self.actions["connect"] = True
        self.run_state = RunState.DISCONNECTED
        self.widgets_enabled = False

    def finalize_connection(self, halted: bool) -> None:
        """Finish connecting once it is known whether the emulator is halted."""
        self._enable(("pause", "reboot", "breakpoint_toggle", "breakpoint_add",
                      "commands"), True)
        self.merge_breakpoints = True
        if halted:
            self._break_occurred()
        else:
            self._enter_run_state()
            self._update_data()
        for listener in self.connected_listeners:
            listener()
        self.widgets_enabled = True

    def handle_update(self, kind: str, name: str, message: str) -> None:
        """React to an update notification pushed by the emulator."""
        if kind == "debug":
            self.reload_breakpoints(False)
        elif kind == "status":
            if name == "cpu":
                if message == "suspended":
                    self._break_occurred()
                elif message == "running":
                    self._enter_run_state()
                    self._update_data()
            elif name == "paused":
                self.paused = message == "true"

    def pause_reply(self, message: str) -> None:
        """Reply to ``set pause``; anything but ``false`` means paused."""
        self.paused = message.strip() != "false"

    # -- commands -------------------------------------------------------

    def set_pause(self, paused: bool) -> None:
        self.paused = paused
        self._command("set pause " + ("true" if paused else "false"))

    def reboot(self) -> None:
        """Unpause, resume if halted, then reset the machine."""
        if self.paused:
            self.set_pause(False)
        if self.actions["run"]:
            self.execute_run()
        self._command("reset")

    def execute_break(self) -> None:
        self._command("debug break")

    def execute_run(self) -> None:
        self._command("debug cont")
        self._enter_run_state()

    def execute_step(self) -> None:
        self._command("debug step")
        self._enter_run_state()

    def execute_step_over(self) -> None:
        self._command("step_over", lambda _message: self.finalize_connection(True))
        self._enter_run_state()

    def execute_step_out(self) -> None:
        self._command("step_out")
        self._enter_run_state()

    def execute_step_back(self) -> None:
        self._command("step_back", lambda _message: self.finalize_connection(True))
        self._enter_run_state()

    def execute_run_to(self, address: int) -> None:
        self._command(f"run_to {address}")
        self._enter_run_state()

    # -- debuggables ----------------------------------------------------

    def set_debuggables(self, text: str) -> None:
        """Store the names of a ``debug list`` reply and ask for each size."""
        self.debuggables = parse_debuggables(text)
        for name in self.debuggables:
            self._command(f"debug size {name}",
                          lambda message, name=name: self.set_debuggable_size(
                              name, _to_int(message)))

    def set_debuggable_size(self, name: str, size: int) -> None:
        """Record a size; once the last one is known, notify listeners."""
        self.debuggables[name] = size
        if self.debuggables and name == next(reversed(list(self.debuggables))):
            snapshot = dict(self.debuggables)
            for listener in self.debuggables_listeners:
                listener(snapshot)


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0