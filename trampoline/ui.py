"""Terminal rendering for the trampoline harness."""

from typing import Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .hooks import Hook

console = Console()

ACCENT = "#00d4e5"
ERROR = "#e55a6e"
DIM = "#4a4a60"


def _payload_preview(payload: bytes, limit: int = 16) -> str:
    if not payload:
        return "-"
    shown = payload[:limit].hex()
    return f"0x{shown}..." if len(payload) > limit else f"0x{shown}"


def render_hooks(hooks: Sequence[Hook], out: Console = console) -> None:
    """Render a batch as a table, one row per hook in dispatch order."""
    table = Table(title="Hook batch", title_style=f"bold {ACCENT}")
    table.add_column("#", justify="right", style=DIM)
    table.add_column("target")
    table.add_column("payload")
    table.add_column("budget", justify="right")

    for index, hook in enumerate(hooks):
        table.add_row(
            str(index), hook.target, _payload_preview(hook.payload), str(hook.resource_budget),
        )
    out.print(table)


def render_summary(hook_count: int, limit: int, used: int, out: Console = console) -> None:
    line = Text()
    line.append("ok ", style=f"bold {ACCENT}")
    line.append("| ", style=DIM)
    line.append(f"{hook_count} hooks dispatched, {used}/{limit} units used, {limit - used} remaining")
    out.print(line)


def render_error(text: str, out: Console = console) -> None:
    err = Text()
    err.append("err ", style=f"bold {ERROR}")
    err.append("| ", style=DIM)
    err.append(text, style=ERROR)
    out.print(err)
