import pytest

from msxdebug.flags import FlagsView, describe_flags


def test_rows_run_from_bit_seven_down():
    rows = describe_flags(0)
    assert [row.bit for row in rows] == list(range(7, -1, -1))
    assert [row.name for row in rows] == ["S", "Z", "", "H", "", "P", "N", "C"]


def test_cleared_flags_descriptions():
    rows = describe_flags(0)
    assert all(row.value == "0" for row in rows)
    assert [row.description for row in rows] == ["(P)", "(NZ)", "", "", "", "(PO)", "", "(NC)"]


def test_set_flags_descriptions():
    rows = describe_flags(0xFF)
    assert all(row.value == "1" for row in rows)
    assert [row.description for row in rows] == ["(M)", "(Z)", "", "", "", "(PE)", "", "(C)"]


def test_view_tracks_changed_bits():
    view = FlagsView()
    view.set_flags(0x41)
    view.set_flags(0x40)
    changed = {row.name for row in view.rows() if row.changed}
    assert changed == {"C"}
    assert view.changed == 0x41 ^ 0x40


def test_initial_set_marks_all_set_bits_changed():
    view = FlagsView()
    view.set_flags(0xC0)
    assert [row.changed for row in view.rows()] == [row.value == "1" for row in view.rows()]


def test_out_of_range_rejected():
    view = FlagsView()
    with pytest.raises(ValueError):
        view.set_flags(256)
    with pytest.raises(ValueError):
        describe_flags(-1)