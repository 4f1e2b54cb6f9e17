"""Textual driver for dockpulse.

The App's event loop is the single owner of DashboardState. Timer ticks, key
presses and worker results all end up in `_send`, which dispatches to the
state and carries out the returned effects. Docker calls run in async
workers (blocking parts in threads) and report back with `post_message`, so
results are applied in the order they complete.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import Static

from .backend import BackendUnavailable, DockerBackend
from .config import AppConfig
from .keymap import build_keymap, resolve_key
from .messages import (
    BackendFailed, BackendReady, CommandCompleted, FetchContainers, Intent, Quit,
    RefreshFailed, RunCommand, Tick, UserIntent,
)
from .state import DashboardState
from .ui import render_body, render_footer, render_status_bar
from .view import build_view_model
from .workers import fetch_containers, run_command

logger = logging.getLogger(__name__)


class RuntimeMessage(Message):
    """Carries a dockpulse message from a worker into the app's queue."""

    def __init__(self, payload: Any) -> None:
        self.payload = payload
        super().__init__()


class DashboardApp(App[None]):
    TITLE = "dockpulse"

    CSS = """
    Screen {
      layout: vertical;
    }

    #body {
      height: 1fr;
      padding: 0 1;
    }

    #status {
      height: 1;
    }

    #footer {
      height: auto;
      padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(self, app_config: Optional[AppConfig] = None,
                 backend: Optional[DockerBackend] = None) -> None:
        super().__init__()
        self.app_config = app_config or AppConfig()
        self.color_theme = self.app_config.ui.color_theme
        self.backend = backend or DockerBackend()
        self.dashboard = DashboardState(
            refresh_interval=self.app_config.ui.refresh_interval,
            error_timeout=self.app_config.ui.error_timeout,
        )
        self.key_intents = build_keymap(self.app_config.keybindings)
        self._last_render: Optional[tuple] = None
        self._quitting = False

    def compose(self) -> ComposeResult:
        yield Static("", id="body")
        yield Static("", id="status")
        yield Static("", id="footer")

    def on_mount(self) -> None:
        self.set_interval(self.app_config.ui.refresh_interval, self._tick)
        self.run_worker(self._connect(), group="connect", exit_on_error=False)
        self._refresh_view(force=True)

    def on_resize(self, event: events.Resize) -> None:
        self._refresh_view(force=True)

    def on_unmount(self) -> None:
        self.backend.close()

    # --- message plumbing ---

    def _tick(self) -> None:
        self._send(Tick())

    def on_runtime_message(self, message: RuntimeMessage) -> None:
        self._send(message.payload)

    def _send(self, message: Any) -> None:
        if self._quitting:
            return
        for effect in self.dashboard.dispatch(message):
            if isinstance(effect, FetchContainers):
                self.run_worker(self._fetch(effect.sequence), group="refresh", exit_on_error=False)
            elif isinstance(effect, RunCommand):
                self.run_worker(self._command(effect), group="commands", exit_on_error=False)
            elif isinstance(effect, Quit):
                self._shutdown_app(effect.return_code)
                return
        self._refresh_view()

    def _shutdown_app(self, return_code: int) -> None:
        logger.info("Quitting")
        self._quitting = True
        self.backend.close()
        self.exit(return_code=return_code)

    # --- workers ---

    async def _connect(self) -> None:
        try:
            await asyncio.to_thread(self.backend.connect)
        except BackendUnavailable as e:
            self.post_message(RuntimeMessage(BackendFailed(str(e))))
            return
        self.post_message(RuntimeMessage(BackendReady()))

    async def _fetch(self, sequence: int) -> None:
        try:
            result = await fetch_containers(
                self.backend, sequence, self.app_config.docker.include_stopped
            )
        except Exception as e:
            logger.error(f"Refresh worker crashed: {e}", exc_info=True)
            result = RefreshFailed(sequence=sequence, error=str(e))
        self.post_message(RuntimeMessage(result))

    async def _command(self, effect: RunCommand) -> None:
        try:
            result = await run_command(self.backend, effect.command, effect.container_id, effect.name)
        except Exception as e:
            logger.error(f"Command worker crashed: {e}", exc_info=True)
            result = CommandCompleted(effect.command, effect.container_id, effect.name, error=str(e))
        self.post_message(RuntimeMessage(result))

    # --- input ---

    async def on_key(self, event: events.Key) -> None:
        intent = resolve_key(self.key_intents, event.key, event.character)
        if intent is None:
            return
        event.stop()
        event.prevent_default()
        self._send(UserIntent(intent))

    async def action_quit(self) -> None:
        self._send(UserIntent(Intent.QUIT))

    # --- rendering ---

    def _refresh_view(self, force: bool = False) -> None:
        key = (self.dashboard.version, int(time.time()))
        if not force and key == self._last_render:
            return
        self._last_render = key

        vm = build_view_model(self.dashboard, self.app_config.keybindings)
        body = self.query_one("#body", Static)
        body.update(render_body(vm, self.color_theme, body.size.height))
        self.query_one("#status", Static).update(render_status_bar(vm, self.color_theme))
        self.query_one("#footer", Static).update(render_footer(vm, self.color_theme))


def run(app_config: Optional[AppConfig] = None, backend: Optional[DockerBackend] = None) -> DashboardApp:
    app = DashboardApp(app_config, backend)
    app.run()
    return app
