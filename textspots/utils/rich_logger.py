"""
Rich console output for textspots.

Colourful log output through ``RichHandler`` plus tables describing spots and
laid-out lines, for debugging detection passes from a terminal.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..models.spot import Spot


def _rich_handler(console: Console) -> RichHandler:
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=True,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


class RichLogger:
    """
    Logger with rich formatting and colors.
    """

    def __init__(self, name: str = "textspots", level: str = "INFO", console: Optional[Console] = None):
        """
        Args:
            name: Logger name
            level: Log level
            console: Console to write to (stderr console by default)
        """
        self.name = name
        self.level = level
        self.console = console or Console(stderr=True)

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.handlers.clear()
        self.logger.addHandler(_rich_handler(self.console))

    def debug(self, message: str, *args: Any):
        self.logger.debug(message, *args)

    def info(self, message: str, *args: Any):
        self.logger.info(message, *args)

    def warning(self, message: str, *args: Any):
        self.logger.warning(message, *args)

    def error(self, message: str, *args: Any):
        self.logger.error(message, *args)

    def success(self, message: str):
        self.console.print(f"[green]✓ {message}[/green]")

    def failure(self, message: str):
        self.console.print(f"[red]✗ {message}[/red]")

    def panel(self, title: str, content: str, style: str = "blue"):
        self.console.print(Panel(content, title=title, style=style))

    def table(self, title: str, data: Dict[str, Any]):
        """Display a property/value mapping, e.g. detection statistics."""
        table = Table(title=title)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="magenta")
        for key, value in data.items():
            table.add_row(str(key), str(value))
        self.console.print(table)

    def spots(self, spots: Iterable[Spot], title: str = "Spots"):
        self.console.print(spot_table(spots, title))


def spot_table(spots: Iterable[Spot], title: str = "Spots") -> Table:
    """Build a table with one row per spot."""
    table = Table(title=title)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Width", justify="right")
    table.add_column("Height", justify="right")
    table.add_column("Opacity", justify="right")

    for spot in spots:
        rect = spot.rect
        table.add_row(
            str(spot.id),
            spot.type.value,
            f"{rect.x:.0f}",
            f"{rect.y:.0f}",
            f"{rect.width:.0f}",
            f"{rect.height:.0f}",
            f"{spot.opacity:.2f}",
        )
    return table


def setup_rich_logging(level: str = "INFO", console: Optional[Console] = None) -> None:
    """Route root logging through a RichHandler."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()
    root_logger.addHandler(_rich_handler(console or Console(stderr=True)))
