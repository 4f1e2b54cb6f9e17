from dockpulse.config import KeyBindings
from dockpulse.keymap import build_keymap, resolve_key
from dockpulse.messages import Intent


def test_default_keymap():
    keymap = build_keymap(KeyBindings())

    assert keymap["k"] is Intent.UP
    assert keymap["down"] is Intent.DOWN
    assert keymap["enter"] is Intent.OPEN
    assert keymap["backspace"] is Intent.BACK
    assert keymap["x"] is Intent.START
    assert keymap["s"] is Intent.STOP
    assert keymap["ctrl+c"] is Intent.QUIT
    assert keymap["r"] is Intent.REFRESH
    assert keymap["R"] is Intent.RESTART


def test_r_action_restart_swaps_r_keys():
    keymap = build_keymap(KeyBindings(r_action="restart"))
    assert keymap["r"] is Intent.RESTART
    assert keymap["R"] is Intent.REFRESH


def test_duplicate_binding_keeps_first(caplog):
    keymap = build_keymap(KeyBindings(up=["up", "s"]))
    assert keymap["s"] is Intent.UP
    assert "bound twice" in caplog.text


def test_resolve_key_falls_back_to_character():
    keymap = build_keymap(KeyBindings())
    assert resolve_key(keymap, "question_mark", "?") is Intent.HELP
    assert resolve_key(keymap, "shift+r", "R") is Intent.RESTART
    assert resolve_key(keymap, "f5", None) is None
