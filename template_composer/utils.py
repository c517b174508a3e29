"""Shared utility functions for the template composer.

Provides JSON (de)serialisation in the manifest's on-disk format, small
file-system helpers, and Rich-based progress reporting.  Output helpers
accept an optional ``Console`` so callers (and tests) can redirect them.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------


def dump_json(data: Any) -> str:
    """Serialise *data* pretty-printed with two-space indent and a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def load_json(path: str | Path) -> Any:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    return json.loads(read_text(Path(path)))


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def iter_files(root: Path, ignore_dirs: tuple[str, ...] | list[str] = ()) -> Iterator[Path]:
    """Yield every file under *root* in sorted order, pruning *ignore_dirs* by name."""
    for entry in sorted(root.iterdir()):
        if entry.is_dir():
            if entry.name in ignore_dirs:
                continue
            yield from iter_files(entry, ignore_dirs)
        elif entry.is_file():
            yield entry


def read_text(path: Path) -> str:
    """Read *path* as UTF-8 with its line endings exactly as stored."""
    with open(path, encoding="utf-8", newline="") as fh:
        return fh.read()


def write_text(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content verbatim.

    No newline translation happens, so ``\\r\\n`` endings read through
    :func:`read_text` are written back unchanged.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(content)


def line_ending(content: str) -> str:
    """Return ``"\\r\\n"`` if *content* uses CRLF line endings, else ``"\\n"``."""
    return "\r\n" if "\r\n" in content else "\n"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step(message: str, *, out: Console | None = None) -> None:
    """Print a cyan step header."""
    (out or console).print(f"[cyan]{message}[/cyan]")


def print_success(message: str, *, out: Console | None = None) -> None:
    """Print a green success message."""
    (out or console).print(f"[bold green]{message}[/bold green]")


def print_error(message: str, *, out: Console | None = None) -> None:
    """Print a red error message."""
    (out or console).print(f"[bold red]{message}[/bold red]")


def print_warning(message: str, *, out: Console | None = None) -> None:
    """Print a yellow warning message."""
    (out or console).print(f"[bold yellow]{message}[/bold yellow]")


def print_summary_table(
    data: dict[str, str], title: str = "Summary", *, out: Console | None = None
) -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    target = out or console
    target.print(table)
    target.print()
