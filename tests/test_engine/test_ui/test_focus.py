from engine.ui.focus import FocusManager, transfer_focus


def test_set_focus_notifies():
    focus = FocusManager()
    changes = []
    focus.on_focus_changed = lambda old, new: changes.append((old, new))

    assert focus.set_focus("start")
    assert not focus.set_focus("start")
    focus.clear_focus()

    assert changes == [(None, "start"), ("start", None)]
    assert focus.focused is None


def test_navigate_wraps():
    focus = FocusManager()
    focus.set_order([0, 1, 2])

    focus.navigate(1)
    assert focus.focused == 0

    focus.navigate(1)
    focus.navigate(1)
    assert focus.focused == 2

    focus.navigate(1)
    assert focus.focused == 0

    focus.navigate(-1)
    assert focus.focused == 2


def test_navigate_empty_order():
    focus = FocusManager()
    assert not focus.navigate(1)
    assert focus.focused is None


def test_transfer_focus_clears_for_one_tick(scheduler):
    focus = FocusManager()
    focus.set_focus("old")
    changes = []
    focus.on_focus_changed = lambda old, new: changes.append(new)

    task = scheduler.start(transfer_focus(focus, "start"))
    assert focus.focused is None

    scheduler.update(0.0)

    assert focus.focused == "start"
    assert changes == [None, "start"]
    assert task.done
