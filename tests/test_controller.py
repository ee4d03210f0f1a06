import pytest

from msxdebug.controller import (
    AddressSlot,
    DebuggerController,
    DisasmStatus,
    DisasmSync,
    MemoryLayout,
    RunState,
    address_slot,
)


def texts(controller):
    return [command for command, _, _ in controller.sent]


def reply_to(controller, text, message):
    for command, on_reply, _ in controller.sent:
        if command == text:
            on_reply(message)
            return
    raise AssertionError(f"no command {text!r} sent")


# -- address_slot ------------------------------------------------------------

def test_address_slot_without_subslot_and_rom_blocks():
    layout = MemoryLayout(primary_slot=[0, 1, 2, 3])
    assert address_slot(layout, 0x8000) == AddressSlot(2, None, None)


def test_address_slot_uses_mapper_segment_when_mapper_present():
    layout = MemoryLayout(primary_slot=[3, 3, 3, 3], secondary_slot=[2, 2, 2, 2],
                          mapper_segment=[4, 5, 6, 7])
    layout.mapper_size[3][2] = 8
    assert address_slot(layout, 0x4000) == AddressSlot(3, 2, 5)


def test_address_slot_uses_rom_block_for_half_page():
    layout = MemoryLayout(primary_slot=[1, 1, 1, 1],
                          rom_block=[-1, -1, 10, 11, -1, -1, -1, -1])
    assert address_slot(layout, 0x4000).segment == 10
    assert address_slot(layout, 0x6000).segment == 11


def test_address_slot_rejects_out_of_range():
    with pytest.raises(ValueError):
        address_slot(MemoryLayout(), 0x10000)


# -- DisasmSync --------------------------------------------------------------

def test_pc_first_then_slots_moves_view():
    moves = []
    sync = DisasmSync(lambda addr, reload: moves.append((addr, reload)))
    assert sync.pc_changed(0x1234) is None
    assert sync.status is DisasmStatus.PC_CHANGED
    assert sync.slots_updated(True) == (0x1234, True)
    assert moves == [(0x1234, True)]
    assert sync.status is DisasmStatus.RESET


def test_slots_first_then_pc_moves_view():
    sync = DisasmSync()
    assert sync.slots_updated(False) is None
    assert sync.status is DisasmStatus.SLOTS_CHECKED
    assert sync.pc_changed(0x10) == (0x10, False)


def test_slots_changed_requests_reload():
    sync = DisasmSync()
    sync.slots_updated(True)
    assert sync.status is DisasmStatus.SLOTS_CHANGED
    assert sync.pc_changed(0x20) == (0x20, True)


# -- connection --------------------------------------------------------------

def test_initial_state_is_disconnected():
    c = DebuggerController()
    assert c.run_state is RunState.DISCONNECTED
    assert c.actions["connect"] is True
    assert c.actions["disconnect"] is False
    assert c.widgets_enabled is False


def test_init_connection_sends_queries_and_procs():
    c = DebuggerController()
    c.init_connection()
    sent = texts(c)
    assert sent[:5] == ["set pause", "debug breaked", "openmsx_update enable status",
                        "openmsx_update enable debug", "debug list"]
    assert any(t.startswith("proc debug_list_all_breaks") for t in sent)
    assert c.actions["disconnect"] is True
    assert c.actions["connect"] is False


@pytest.mark.parametrize("reply,paused", [("false", False), ("true", True), ("on\n", True)])
def test_pause_reply(reply, paused):
    c = DebuggerController()
    c.pause_reply(reply)
    assert c.paused is paused


def test_breaked_reply_finalizes_halted():
    c = DebuggerController()
    c.init_connection()
    reply_to(c, "debug breaked", "1\n")
    assert c.run_state is RunState.BREAK
    assert c.actions["run"] is True
    assert c.actions["break"] is False
    assert c.widgets_enabled is True
    assert c.register_requests == 1


def test_finalize_running_merges_breakpoints_once():
    merges = []
    c = DebuggerController()
    c.breakpoint_listeners.append(lambda msg, merge: merges.append(merge))
    c.finalize_connection(False)
    assert c.run_state is RunState.RUNNING
    assert c.actions["break"] is True
    reply_to(c, "debug_list_all_breaks", "")
    assert merges == [True]
    assert c.merge_breakpoints is False


def test_connection_closed_disables_actions():
    c = DebuggerController()
    c.finalize_connection(True)
    c.connection_closed()
    assert c.actions["pause"] is False
    assert c.actions["run"] is False
    assert c.run_state is RunState.DISCONNECTED


def test_debug_update_error_is_recorded():
    c = DebuggerController()
    c.init_connection()
    error = next(e for t, _, e in c.sent if t == "openmsx_update enable debug")
    error("disabled")
    assert c.debug_updates_unavailable is True


# -- updates -----------------------------------------------------------------

def test_handle_update_cpu_states():
    c = DebuggerController()
    c.handle_update("status", "cpu", "suspended")
    assert c.run_state is RunState.BREAK
    c.handle_update("status", "cpu", "running")
    assert c.run_state is RunState.RUNNING


def test_handle_update_paused():
    c = DebuggerController()
    c.handle_update("status", "paused", "true")
    assert c.paused is True
    c.handle_update("status", "paused", "false")
    assert c.paused is False


def test_handle_update_debug_reloads_breakpoints():
    c = DebuggerController()
    c.handle_update("debug", "", "")
    assert texts(c) == ["debug_list_all_breaks"]


# -- execution ---------------------------------------------------------------

@pytest.mark.parametrize("method,command", [
    ("execute_run", "debug cont"),
    ("execute_step", "debug step"),
    ("execute_step_out", "step_out"),
    ("execute_step_over", "step_over"),
    ("execute_step_back", "step_back"),
])
def test_execute_commands_enter_run_state(method, command):
    c = DebuggerController()
    c.finalize_connection(True)
    c.sent.clear()
    getattr(c, method)()
    assert texts(c) == [command]
    assert c.run_state is RunState.RUNNING


def test_run_to_sends_decimal_address():
    c = DebuggerController()
    c.execute_run_to(256)
    assert texts(c) == ["run_to 256"]


def test_step_over_reply_returns_to_break_state():
    c = DebuggerController()
    c.execute_step_over()
    reply_to(c, "step_over", "")
    assert c.run_state is RunState.BREAK


def test_execute_break():
    c = DebuggerController()
    c.execute_break()
    assert texts(c) == ["debug break"]


def test_set_pause_sends_command():
    c = DebuggerController()
    c.set_pause(True)
    assert c.paused is True
    assert texts(c) == ["set pause true"]


def test_reboot_unpauses_and_resumes():
    c = DebuggerController()
    c.finalize_connection(True)
    c.set_pause(True)
    c.sent.clear()
    c.reboot()
    assert texts(c) == ["set pause false", "debug cont", "reset"]
    assert c.paused is False


def test_reboot_when_running_only_resets():
    c = DebuggerController()
    c.finalize_connection(False)
    c.sent.clear()
    c.reboot()
    assert texts(c) == ["reset"]


# -- debuggables -------------------------------------------------------------

def test_set_debuggables_requests_sizes_and_notifies_on_last():
    seen = []
    c = DebuggerController()
    c.debuggables_listeners.append(seen.append)
    c.set_debuggables("memory {CPU regs} VRAM")
    assert set(texts(c)) == {"debug size memory", "debug size {CPU regs}",
                             "debug size VRAM"}
    names = list(c.debuggables)
    for name in names[:-1]:
        reply_to(c, f"debug size {name}", "28")
    assert seen == []
    reply_to(c, f"debug size {names[-1]}", "65536\n")
    assert len(seen) == 1
    assert seen[0][names[-1]] == 65536
    assert seen[0][names[0]] == 28


def test_invalid_size_reply_becomes_zero():
    c = DebuggerController()
    c.set_debuggables("memory")
    reply_to(c, "debug size memory", "oops")
    assert c.debuggables == {"memory": 0}