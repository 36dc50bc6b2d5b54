"""Shared Rich consoles and styles for tokenkeeper output.

Results go to stdout via ``console``; chrome and logs go to stderr via
``err_console``.
"""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

TOKENKEEPER_THEME = Theme(
    {
        "info": "cyan",
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "status.valid": "green",
        "status.expiring": "yellow",
        "status.expired": "bold red",
        "muted": "dim",
    }
)

console = Console(theme=TOKENKEEPER_THEME, highlight=False)
err_console = Console(stderr=True, theme=TOKENKEEPER_THEME, highlight=False)
