from dockpulse.messages import (
    BackendFailed, BackendReady, Command, CommandCompleted, ContainersLoaded,
    FetchContainers, Intent, Quit, RefreshFailed, RunCommand, Tick, UserIntent,
)
from dockpulse.model import EMPTY_SNAPSHOT, ResourceSample, ViewMode
from dockpulse.state import DashboardState


def connected_state(clock=None):
    state = DashboardState(clock=clock) if clock else DashboardState()
    [effect] = state.dispatch(BackendReady())
    assert isinstance(effect, FetchContainers)
    return state, effect.sequence


def load(state, seq, snap):
    return state.dispatch(ContainersLoaded(sequence=seq, snapshot=snap))


def press(state, intent):
    return state.dispatch(UserIntent(intent))


def test_no_fetch_before_backend_ready():
    state = DashboardState()
    assert state.dispatch(Tick()) == []
    assert state.loading


def test_empty_runtime():
    state, seq = connected_state()
    load(state, seq, EMPTY_SNAPSHOT)

    assert not state.loading
    assert state.selection.cursor_index == 0
    assert press(state, Intent.OPEN) == []
    assert state.selection.mode is ViewMode.LIST
    assert press(state, Intent.DOWN) == []
    assert state.selection.cursor_index == 0


def test_loaded_snapshot_is_applied(make_record, make_snapshot):
    state, seq = connected_state()
    snap = make_snapshot(make_record("a", "web"), samples={"a": ResourceSample(200.0, 10.0)}, sequence=seq)
    load(state, seq, snap)

    assert state.store.current() is snap
    assert state.store.sample_for("a").cpu_percent == 200.0


def test_timer_fetch_coalesced_and_stale_results_discarded(make_record, make_snapshot):
    state, seq = connected_state()
    assert state.dispatch(Tick()) == []  # startup fetch still outstanding

    load(state, seq, make_snapshot(make_record("new"), sequence=seq))

    # a result older than the applied one never reverts the store
    load(state, seq - 1, make_snapshot(make_record("old"), sequence=seq - 1))
    assert [r.id for r in state.store.current()] == ["new"]


def test_user_refresh_during_fetch_issues_follow_up(make_record, make_snapshot):
    state, seq = connected_state()
    assert press(state, Intent.REFRESH) == []

    effects = load(state, seq, make_snapshot(make_record("a"), sequence=seq))
    assert effects == [FetchContainers(seq + 1)]


def test_refresh_failure_keeps_previous_snapshot(make_record, make_snapshot):
    state, seq = connected_state()
    snap = make_snapshot(make_record("a"), sequence=seq)
    load(state, seq, snap)

    [tick] = state.dispatch(Tick())
    state.dispatch(RefreshFailed(sequence=tick.sequence, error="daemon gone"))
    assert state.refresh_error == "daemon gone"
    assert state.store.current() is snap

    [retry] = state.dispatch(Tick())
    load(state, retry.sequence, make_snapshot(make_record("a"), sequence=retry.sequence))
    assert state.refresh_error is None


def test_cursor_clamped_when_list_shrinks(make_record, make_snapshot):
    state, seq = connected_state()
    load(state, seq, make_snapshot(*[make_record(str(i)) for i in range(5)], sequence=seq))
    for _ in range(4):
        press(state, Intent.DOWN)
    assert state.selection.cursor_index == 4

    [tick] = state.dispatch(Tick())
    load(state, tick.sequence, make_snapshot(make_record("0"), make_record("1"), sequence=tick.sequence))
    assert state.selection.cursor_index == 1


def test_detail_follows_id_and_goes_stale(make_record, make_snapshot):
    state, seq = connected_state()
    load(state, seq, make_snapshot(make_record("a", "web"), make_record("b", "db"), sequence=seq))
    press(state, Intent.DOWN)
    press(state, Intent.OPEN)

    record, _, stale = state.detail()
    assert record.name == "db" and not stale

    # reordered: still the same container
    [tick] = state.dispatch(Tick())
    load(state, tick.sequence, make_snapshot(
        make_record("b", "db", status="Up 5 minutes"), make_record("a", "web"), sequence=tick.sequence))
    record, _, stale = state.detail()
    assert record.id == "b" and record.status == "Up 5 minutes" and not stale

    # vanished: last known record, marked stale, still in detail mode
    [tick] = state.dispatch(Tick())
    load(state, tick.sequence, make_snapshot(make_record("a", "web"), sequence=tick.sequence))
    record, _, stale = state.detail()
    assert record.id == "b" and stale
    assert state.selection.mode is ViewMode.DETAIL

    press(state, Intent.BACK)
    assert state.detail() is None
    assert state.selection.mode is ViewMode.LIST
    assert state.selection.cursor_index == 0


def test_list_only_intents_ignored_in_detail(make_record, make_snapshot):
    state, seq = connected_state()
    load(state, seq, make_snapshot(make_record("a"), make_record("b"), sequence=seq))
    press(state, Intent.OPEN)
    before = state.version

    assert press(state, Intent.DOWN) == []
    assert press(state, Intent.OPEN) == []
    assert state.version == before


def test_command_failure_is_transient(make_record, make_snapshot, clock):
    state, seq = connected_state(clock)
    snap = make_snapshot(make_record("abc123", "web"), sequence=seq)
    load(state, seq, snap)

    [effect] = press(state, Intent.STOP)
    assert effect == RunCommand(command=Command.STOP, container_id="abc123", name="web")
    assert state.notice.text == "Stopping web..."

    state.dispatch(CommandCompleted(Command.STOP, "abc123", "web", error="connection refused"))
    assert state.notice.is_error
    assert state.notice.text == "Failed to stop web: connection refused"
    assert state.store.current() is snap
    assert state.selection.cursor_index == 0

    # scheduled refresh still runs and the error expires
    clock.now += 1
    [tick] = state.dispatch(Tick())
    assert isinstance(tick, FetchContainers)
    assert state.notice is not None
    clock.now += 3
    state.dispatch(Tick())
    assert state.notice is None


def test_command_success_clears_notice(make_record, make_snapshot):
    state, seq = connected_state()
    load(state, seq, make_snapshot(make_record("a", "web"), sequence=seq))
    press(state, Intent.START)

    state.dispatch(CommandCompleted(Command.START, "a", "web"))
    assert state.notice is None


def test_command_in_detail_targets_detail_container(make_record, make_snapshot):
    state, seq = connected_state()
    load(state, seq, make_snapshot(make_record("a"), make_record("b"), sequence=seq))
    press(state, Intent.DOWN)
    press(state, Intent.OPEN)

    [effect] = press(state, Intent.RESTART)
    assert effect.container_id == "b"

    [tick] = state.dispatch(Tick())
    load(state, tick.sequence, make_snapshot(make_record("a"), sequence=tick.sequence))
    assert press(state, Intent.STOP) == []


def test_fatal_startup_only_accepts_quit():
    state = DashboardState()
    state.dispatch(BackendFailed("Cannot connect to the Docker daemon"))

    assert state.fatal_error == "Cannot connect to the Docker daemon"
    assert not state.loading
    assert state.dispatch(Tick()) == []
    assert press(state, Intent.REFRESH) == []
    assert press(state, Intent.DOWN) == []
    assert press(state, Intent.QUIT) == [Quit(return_code=1)]


def test_quit_and_help():
    state, _ = connected_state()
    press(state, Intent.HELP)
    assert state.show_help
    press(state, Intent.HELP)
    assert not state.show_help
    assert press(state, Intent.QUIT) == [Quit()]


def test_refresh_before_connection_is_ignored():
    state = DashboardState()

    assert press(state, Intent.REFRESH) == []
    assert state.scheduler.outstanding is None
    assert state.refresh_error is None
    assert state.loading
