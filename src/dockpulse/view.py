"""
Read-only view model.

`build_view_model` projects DashboardState into plain immutable values once
per render. Renderers only ever see a ViewModel, so nothing on the render
path can mutate application state.
"""

import time
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .config import KeyBindings
from .keymap import r_key_intents
from .messages import Intent
from .model import ContainerRecord, ResourceSample, SelectionState, ViewMode
from .state import DashboardState
from .stats import count_by_lifecycle

RUNNING_MARK = "●"
STOPPED_MARK = "○"


@dataclass(frozen=True)
class RowView:
    name: str
    image: str
    cpu: str
    memory: str
    state: str
    running: bool


@dataclass(frozen=True)
class DetailView:
    record: ContainerRecord
    sample: ResourceSample
    stale: bool


@dataclass(frozen=True)
class ViewModel:
    rows: Tuple[RowView, ...]
    selection: SelectionState
    detail: Optional[DetailView]
    status_left: str
    status_right: str
    help_text: str
    notice: Optional[str] = None
    notice_is_error: bool = False
    refresh_error: Optional[str] = None
    loading: bool = False
    fatal_error: Optional[str] = None
    show_help: bool = False
    refresh_key: Optional[str] = "r"
    quit_key: str = "q"

    @property
    def is_detail(self) -> bool:
        return self.selection.mode is ViewMode.DETAIL and self.detail is not None


def state_label(record: ContainerRecord) -> str:
    if record.is_running:
        return f"{RUNNING_MARK} {record.state}"
    return f"{STOPPED_MARK} {record.state}"


def row_for(record: ContainerRecord, sample: ResourceSample) -> RowView:
    return RowView(
        name=record.name,
        image=record.image,
        cpu=sample.cpu_text,
        memory=sample.memory_text,
        state=state_label(record),
        running=record.is_running,
    )


def visible_window(cursor: int, total: int, height: int) -> Tuple[int, int]:
    """Slice [start, end) of rows to show so that the cursor row is visible."""
    if height <= 0 or total <= 0:
        return 0, 0
    if total <= height:
        return 0, total
    cursor = max(0, min(cursor, total - 1))
    start = max(0, cursor - height + 1)
    return start, start + height


def _key_label(keys) -> str:
    labels = {"up": "↑", "down": "↓", "escape": "esc", "question_mark": "?"}
    shown = []
    for key in keys:
        label = labels.get(key, key)
        if label not in shown:
            shown.append(label)
    return "/".join(shown)


def quit_label(bindings: KeyBindings) -> str:
    return _key_label(bindings.quit[:1])


def refresh_key_for(bindings: KeyBindings) -> Optional[str]:
    for key, intent in r_key_intents(bindings).items():
        if intent is Intent.REFRESH:
            return key
    return None


def help_text(bindings: KeyBindings, mode: ViewMode, full: bool) -> str:
    quit_part = f"{quit_label(bindings)} quit"
    if not full:
        return f"{_key_label(bindings.help[:1])} help • {quit_part}"

    if mode is ViewMode.DETAIL:
        parts = [f"{_key_label(bindings.back)} go back"]
    else:
        parts = [
            f"{_key_label(bindings.up)} move up",
            f"{_key_label(bindings.down)} move down",
            f"{_key_label(bindings.open)} details",
        ]
    parts += [
        f"{_key_label(bindings.start)} start",
        f"{_key_label(bindings.stop)} stop",
    ]
    parts += [f"{key} {intent.value}" for key, intent in r_key_intents(bindings).items()]
    parts.append(quit_part)
    return " • ".join(parts)


def build_view_model(
    state: DashboardState, bindings: Optional[KeyBindings] = None, now: Optional[float] = None
) -> ViewModel:
    bindings = bindings or KeyBindings()
    clock = time.strftime("%H:%M:%S", time.localtime(now if now is not None else state.clock()))
    snapshot = state.store.current()
    selection = replace(state.selection)

    rows = tuple(row_for(record, snapshot.sample_for(record.id)) for record in snapshot)

    detail = None
    resolved = state.detail()
    if resolved is not None:
        record, sample, stale = resolved
        detail = DetailView(record=record, sample=sample, stale=stale)

    if detail is not None and selection.mode is ViewMode.DETAIL:
        record = detail.record
        status_left = f"Name: {record.name}. ID: {record.short_id}. Image: {record.image}"
        status_right = clock
    else:
        running, stopped = count_by_lifecycle(snapshot)
        status_left = f"{len(snapshot)} containers  {RUNNING_MARK} {running} | {STOPPED_MARK} {stopped}"
        if rows:
            status_right = f"Selected {selection.cursor_index + 1} • {clock}"
        else:
            status_right = clock

    notice = state.notice
    return ViewModel(
        rows=rows,
        selection=selection,
        detail=detail,
        status_left=status_left,
        status_right=status_right,
        help_text=help_text(bindings, selection.mode, state.show_help),
        notice=notice.text if notice else None,
        notice_is_error=bool(notice and notice.is_error),
        refresh_error=state.refresh_error,
        loading=state.loading,
        fatal_error=state.fatal_error,
        show_help=state.show_help,
        refresh_key=refresh_key_for(bindings),
        quit_key=quit_label(bindings),
    )
