"""
dockpulse - a live terminal dashboard for Docker containers.

Polls the Docker daemon for the current set of containers and shows them as
a navigable table with CPU/RAM usage, a detail view per container (ports,
networks, mounts) and start/stop/restart commands for the selected one.

Main Components:
  - state.py: single owner of all mutable state, fed by messages
  - scheduler.py / workers.py: polling cadence and async Docker calls
  - stats.py: CPU/RAM percentages from cumulative counters
  - selection.py: list/detail mode and cursor reconciliation
  - textual_app.py: Textual driver (event loop, keys, rendering)
  - backend.py: Docker API wrapper

Usage:
  dockpulse
  python -m dockpulse

Dependencies:
  - docker>=7.0.0
  - textual, rich
  - PyYAML
  - Python 3.10+
"""

import os
from pathlib import Path

__version__ = "0.1.0"


def get_log_path() -> str:
    """
    Get the log file path following the XDG Base Directory layout.

    Returns XDG_DATA_HOME/dockpulse/logs/dockpulse.log with fallback to /tmp.
    Creates directory if it doesn't exist.

    Returns:
        str: Absolute path to log file (/tmp/dockpulse.log as fallback)
    """
    xdg_data_home = os.environ.get('XDG_DATA_HOME')
    if not xdg_data_home:
        # Default fallback: ~/.local/share
        xdg_data_home = Path.home() / '.local' / 'share'
    else:
        xdg_data_home = Path(xdg_data_home)

    log_dir = xdg_data_home / 'dockpulse' / 'logs'

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return str(log_dir / 'dockpulse.log')
    except (PermissionError, OSError):
        return '/tmp/dockpulse.log'
