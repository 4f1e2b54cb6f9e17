"""
Rich-based rendering.

Turns a ViewModel into Rich renderables that the Textual app drops into its
Static widgets. Every function takes the color theme as an argument; there
are no module-level styles, so any function here can be rendered in
isolation with `rich.console.Console(record=True)`.

Key Functions:
  - render_body(): dispatcher (fatal / loading / list / detail)
  - render_table(): container list with the cursor row highlighted
  - render_detail(): state, status, usage and port/network/mount trees
  - render_status_bar(): left/right status line
  - render_footer(): notices, refresh errors and the help line
"""

import time

from rich import box
from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from .config import ColorTheme
from .model import ContainerRecord
from .view import DetailView, ViewModel, visible_window

TABLE_CHROME_LINES = 4  # header, header rule, top and bottom border


def render_fatal(error: str, theme: ColorTheme, quit_key: str = "q") -> RenderableType:
    return Text.assemble(
        "\n",
        ("Error connecting to Docker: ", f"bold {theme.error}"),
        (error, theme.error),
        f"\n\nPress {quit_key} to quit.\n",
    )


def render_loading(theme: ColorTheme) -> RenderableType:
    return Text("\nLoading containers...\n", style=theme.muted)


def render_empty(vm: ViewModel, theme: ColorTheme) -> RenderableType:
    return Text.assemble(
        ("No containers found.\n", "bold"),
        "\nRun 'docker ps -a' to check if you have containers.\n",
        (_empty_hint(vm), theme.muted),
    )


def _empty_hint(vm: ViewModel) -> str:
    if vm.refresh_key:
        return f"Press '{vm.refresh_key}' to refresh or '{vm.quit_key}' to quit.\n"
    return f"Press '{vm.quit_key}' to quit.\n"


def render_table(vm: ViewModel, theme: ColorTheme, height: int = 0) -> RenderableType:
    if not vm.rows:
        return render_empty(vm, theme)

    table = Table(
        box=box.SQUARE,
        expand=True,
        border_style=theme.border,
        header_style=theme.header,
    )
    table.add_column("Name", ratio=4, no_wrap=True, overflow="ellipsis")
    table.add_column("Image", ratio=6, no_wrap=True, overflow="ellipsis")
    table.add_column("CPU", width=10, justify="right", no_wrap=True)
    table.add_column("Memory", width=10, justify="right", no_wrap=True)
    table.add_column("State", width=12, no_wrap=True)

    cursor = vm.selection.cursor_index
    visible = max(1, height - TABLE_CHROME_LINES) if height else len(vm.rows)
    start, end = visible_window(cursor, len(vm.rows), visible)
    for index in range(start, end):
        row = vm.rows[index]
        state_style = theme.running if row.running else theme.stopped
        table.add_row(
            row.name,
            row.image,
            row.cpu,
            row.memory,
            Text(row.state, style=state_style),
            style=theme.selected if index == cursor else None,
        )
    return table


def _tree(title: str, theme: ColorTheme) -> Tree:
    return Tree(Text(f"⁜ {title}", style=theme.tree_root), guide_style=theme.tree_branch)


def port_lines(record: ContainerRecord):
    for port in record.ports:
        if port.host_port:
            yield f"{port.host_ip or ''}:{port.host_port} -> {port.container_port}/{port.protocol}"
        else:
            yield f"{port.container_port}/{port.protocol}"


def render_detail(detail: DetailView, theme: ColorTheme) -> RenderableType:
    record, sample = detail.record, detail.sample
    label = f"bold {theme.accent}"
    state_color = theme.running if record.is_running else theme.stopped
    created = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(record.created))

    lines = [
        Text.assemble(("State: ", label), (record.state, f"bold {state_color}")),
        Text.assemble(("Status: ", label), (record.status, theme.text)),
        Text.assemble(("Created: ", label), (created, theme.text)),
        Text.assemble(("CPU: ", label), (sample.cpu_text, theme.text),
                      ("  Memory: ", label), (sample.memory_text, theme.text)),
    ]
    if detail.stale:
        lines.append(Text("Container is no longer reported by Docker; details are frozen.",
                          style=theme.warning))

    parts: list = [Text("\n").join(lines)]

    if record.ports:
        tree = _tree("Ports", theme)
        for line in port_lines(record):
            tree.add(Text(line, style=theme.tree_item))
        parts += [Text(""), tree]

    if record.networks:
        tree = _tree("Networks", theme)
        for network in record.networks:
            tree.add(Text(f"{network.name} (IP: {network.ip_address})", style=theme.tree_item))
        parts += [Text(""), tree]

    if record.mounts:
        tree = _tree("Mounts", theme)
        for mount in record.mounts:
            node = tree.add(Text(f"🖿 {mount.destination}", style=theme.tree_item))
            node.add(Text(f"Source: {mount.source}", style=theme.tree_item))
            node.add(Text(f"Type: {mount.type}", style=theme.tree_item))
            node.add(Text(f"Mode: {'rw' if mount.read_write else 'ro'}", style=theme.tree_item))
            if mount.propagation:
                node.add(Text(f"Propagation: {mount.propagation}", style=theme.tree_item))
        parts += [Text(""), tree]

    return Group(*parts)


def render_body(vm: ViewModel, theme: ColorTheme, height: int = 0) -> RenderableType:
    if vm.fatal_error:
        return render_fatal(vm.fatal_error, theme, vm.quit_key)
    if vm.loading:
        return render_loading(theme)
    if vm.is_detail:
        return render_detail(vm.detail, theme)
    return render_table(vm, theme, height)


def render_status_bar(vm: ViewModel, theme: ColorTheme) -> RenderableType:
    bar = Table.grid(expand=True, padding=(0, 2))
    bar.add_column(justify="left", no_wrap=True, overflow="ellipsis")
    bar.add_column(justify="right", no_wrap=True)
    bar.add_row(vm.status_left, vm.status_right, style=theme.status_bar)
    return bar


def render_footer(vm: ViewModel, theme: ColorTheme) -> RenderableType:
    if vm.fatal_error:
        return Text(f"{vm.quit_key} quit", style=theme.muted)
    lines = []
    if vm.notice:
        lines.append(Text(vm.notice, style=theme.error if vm.notice_is_error else theme.warning))
    if vm.refresh_error:
        lines.append(Text(f"Refresh failed: {vm.refresh_error}", style=theme.error))
    lines.append(Text(vm.help_text, style=theme.muted))
    return Text("\n").join(lines)
