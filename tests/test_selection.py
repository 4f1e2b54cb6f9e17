from dockpulse.actions import CommandDispatcher
from dockpulse.messages import Command, Intent, RunCommand
from dockpulse.model import EMPTY_SNAPSHOT, SelectionState, ViewMode
from dockpulse.selection import ViewModeMachine, allowed_intents, clamp_cursor, reconcile
from dockpulse.store import SnapshotStore


def test_clamp_cursor():
    assert clamp_cursor(5, 3) == 2
    assert clamp_cursor(-1, 3) == 0
    assert clamp_cursor(4, 0) == 0


def test_allowed_intents_per_mode():
    assert Intent.BACK not in allowed_intents(ViewMode.LIST)
    assert Intent.OPEN in allowed_intents(ViewMode.LIST)
    detail = allowed_intents(ViewMode.DETAIL)
    assert Intent.UP not in detail and Intent.DOWN not in detail and Intent.OPEN not in detail
    assert {Intent.START, Intent.STOP, Intent.RESTART, Intent.REFRESH} <= detail


def test_move_clamps_at_edges(make_record, make_snapshot):
    snap = make_snapshot(*[make_record(str(i)) for i in range(3)])
    machine = ViewModeMachine()

    assert not machine.move(-1, snap)
    assert machine.move(1, snap)
    assert machine.move(1, snap)
    assert not machine.move(1, snap)
    assert machine.selection.cursor_index == 2


def test_open_on_empty_snapshot_is_noop():
    machine = ViewModeMachine()
    assert machine.open(EMPTY_SNAPSHOT) is None
    assert machine.mode is ViewMode.LIST
    assert machine.selection.detail_id is None


def test_open_and_back(make_record, make_snapshot):
    snap = make_snapshot(make_record("a"), make_record("b"))
    machine = ViewModeMachine()
    machine.move(1, snap)

    opened = machine.open(snap)
    assert opened.id == "b"
    assert machine.in_detail
    assert machine.selection.detail_id == "b"
    # cursor does not move in detail mode
    assert not machine.move(-1, snap)

    assert machine.back()
    assert machine.mode is ViewMode.LIST
    assert machine.selection.detail_id is None
    assert machine.selection.cursor_index == 1
    assert not machine.back()


def test_reconcile_clamps_cursor_after_shrink(make_record, make_snapshot):
    selection = SelectionState(cursor_index=4)
    smaller = make_snapshot(make_record("a"), make_record("b"))

    assert reconcile(selection, smaller) is None
    assert selection.cursor_index == 1

    reconcile(selection, EMPTY_SNAPSHOT)
    assert selection.cursor_index == 0


def test_reconcile_in_detail_follows_id_not_position(make_record, make_snapshot):
    selection = SelectionState(mode=ViewMode.DETAIL, cursor_index=0, detail_id="b")
    reordered = make_snapshot(make_record("b", name="moved"), make_record("a"))

    found = reconcile(selection, reordered)
    assert found.name == "moved"

    gone = make_snapshot(make_record("a"))
    assert reconcile(selection, gone) is None
    assert selection.mode is ViewMode.DETAIL
    assert selection.detail_id == "b"


def test_dispatcher_targets_cursor_row_in_list_mode(make_record, make_snapshot):
    store = SnapshotStore()
    store.replace(make_snapshot(make_record("a", "web"), make_record("b", "db")))
    machine = ViewModeMachine()
    machine.move(1, store.current())

    effect = CommandDispatcher(store, machine).on_selection(Command.STOP)

    assert effect == RunCommand(command=Command.STOP, container_id="b", name="db")


def test_dispatcher_targets_detail_id_in_detail_mode(make_record, make_snapshot):
    store = SnapshotStore()
    store.replace(make_snapshot(make_record("a", "web"), make_record("b", "db")))
    machine = ViewModeMachine(SelectionState(mode=ViewMode.DETAIL, cursor_index=0, detail_id="b"))

    effect = CommandDispatcher(store, machine).on_selection(Command.RESTART)

    assert effect.container_id == "b"
    assert effect.command is Command.RESTART


def test_dispatcher_without_resolved_target_is_noop(make_record, make_snapshot):
    store = SnapshotStore()
    machine = ViewModeMachine()
    dispatcher = CommandDispatcher(store, machine)

    assert dispatcher.on_selection(Command.START) is None
    assert dispatcher.start("missing") is None
    assert dispatcher.stop(None) is None

    store.replace(make_snapshot(make_record("a")))
    machine.selection.mode = ViewMode.DETAIL
    machine.selection.detail_id = "gone"
    assert dispatcher.on_selection(Command.STOP) is None
