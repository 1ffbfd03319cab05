from selection import Selection


def test_toggle_adds_then_removes():
    sel = Selection()
    assert sel.toggle("a") is True
    assert "a" in sel
    assert sel.toggle("a") is False
    assert len(sel) == 0


def test_select_all_acts_on_visible_rows_only():
    all_ids = [f"o{n}" for n in range(10)]
    visible = all_ids[2:5]
    sel = Selection()

    sel.select_all(visible)
    assert sel.ids == visible

    sel.select_all(visible)
    assert sel.ids == []


def test_select_all_with_partial_selection_selects_every_visible_row():
    sel = Selection(["o1"])
    sel.select_all(["o1", "o2", "o3"])
    assert sel.ids == ["o1", "o2", "o3"]


def test_select_all_on_empty_view_clears():
    sel = Selection(["o1"])
    sel.select_all([])
    assert sel.ids == []


def test_retain_drops_vanished_ids_silently():
    sel = Selection(["a", "b", "c"])
    sel.retain(["c", "a", "z"])
    assert sel.ids == ["a", "c"]


def test_clear_and_deduplicated_init():
    sel = Selection(["a", "a", "b"])
    assert sel.ids == ["a", "b"]
    sel.clear()
    assert list(sel) == []
