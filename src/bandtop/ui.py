"""Interactive TUI using textual."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.cells import get_character_cell_size
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import DataTable, Static

from bandtop.charts import render_bars, render_line
from bandtop.units import UnitFamily, format_bandwidth

if TYPE_CHECKING:
    from bandtop.monitor import Monitor
    from bandtop.view import ProcessRow

COLUMN_TITLES = (
    "Process",
    "Down/s",
    "Up/s",
    "Total Down",
    "Total Up",
    "Down Chart",
    "Up Chart",
)
FIXED_COLUMN_WIDTHS = (24, 12, 12, 12, 12)
MIN_CHART_WIDTH = 10
HELP_TEXT = "Press <SPACE> to toggle | Press <C> to clear | Press <Q> to quit"


def split_columns(width: int) -> list[int]:
    """Column widths for a table ``width`` cells wide.

    The text columns have fixed widths and the two charts share whatever
    is left, each getting at least ``MIN_CHART_WIDTH``.
    """
    remaining = width - sum(FIXED_COLUMN_WIDTHS)
    down_chart = max(remaining // 2, MIN_CHART_WIDTH)
    up_chart = max(remaining - down_chart, MIN_CHART_WIDTH)
    return [*FIXED_COLUMN_WIDTHS, down_chart, up_chart]


def truncate_to_width(text: str, max_width: int) -> str:
    """Cut ``text`` so it occupies at most ``max_width`` terminal cells."""
    if max_width <= 0:
        return ""
    width = 0
    out = []
    for char in text:
        char_width = get_character_cell_size(char)
        if width + char_width > max_width:
            break
        width += char_width
        out.append(char)
    return "".join(out)


def format_elapsed(seconds: float) -> str:
    total = int(seconds)
    return f"{total // 3600:02d}:{total % 3600 // 60:02d}:{total % 60:02d}"


class HeaderDisplay(Static):
    """Widget showing interface, totals and elapsed time."""

    def update_header(
        self,
        interface: str | None,
        total_upload: int,
        total_download: int,
        unit_family: UnitFamily,
        elapsed: float,
        paused: bool,
    ) -> None:
        """Update the displayed header."""
        up_total = format_bandwidth(total_upload, unit_family)
        down_total = format_bandwidth(total_download, unit_family)
        text = (
            f"{interface or 'all interfaces'} | Total Up / Down: {up_total} / {down_total}"
            f" | {format_elapsed(elapsed)}"
        )
        if paused:
            text += " [PAUSED]"
        self.update(Text(text))


class FooterDisplay(Static):
    """Widget with the key help line."""

    def update_footer(self, paused: bool) -> None:
        status = "Paused" if paused else "Live"
        self.update(Text(f"{status} | {HELP_TEXT}"))


class BandtopApp(App[None]):
    """Main bandtop TUI application."""

    CSS = """
    Screen {
        background: $surface;
    }
    #header-display {
        dock: top;
        height: 1;
        background: $primary-background;
        color: $text;
        padding: 0 1;
    }
    #footer-display {
        dock: bottom;
        height: 1;
        color: $text-muted;
        text-style: bold;
        padding: 0 1;
    }
    #table-container {
        height: 1fr;
    }
    DataTable {
        height: 100%;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("space", "toggle_pause", "Pause"),
        Binding("c", "clear", "Clear"),
    ]

    def __init__(
        self,
        monitor: Monitor,
        interface: str | None = None,
        unit_family: UnitFamily = UnitFamily.BIN_BYTES,
        chart: str = "bar",
        tick: float = 1.0,
    ) -> None:
        super().__init__()
        self._monitor = monitor
        self._interface = interface
        self._unit_family = unit_family
        self._chart = chart
        self._tick = tick
        self._paused = False
        self._elapsed = 0.0
        self._widths = split_columns(0)

    def compose(self) -> ComposeResult:
        """Compose the app layout."""
        yield HeaderDisplay(id="header-display")
        yield Container(DataTable(id="traffic-table"), id="table-container")
        yield FooterDisplay(id="footer-display")

    def on_mount(self) -> None:
        """Set up the table and start the tick timer."""
        table = self.query_one("#traffic-table", DataTable)
        table.cursor_type = "none"
        self._layout_columns()
        self._refresh_header()
        self.query_one("#footer-display", FooterDisplay).update_footer(self._paused)
        self.set_interval(self._tick, self._on_tick)

    def on_resize(self) -> None:
        if not self.query("#traffic-table"):
            return
        self._layout_columns()
        self._refresh_table()

    def _layout_columns(self) -> None:
        """Recreate the columns to fit the current terminal width."""
        table = self.query_one("#traffic-table", DataTable)
        padding = 2 * table.cell_padding * len(COLUMN_TITLES)
        self._widths = split_columns(self.size.width - padding - 2)
        table.clear(columns=True)
        for title, width in zip(COLUMN_TITLES, self._widths):
            table.add_column(title, width=width)

    def _on_tick(self) -> None:
        self._monitor.tick()
        if self._paused:
            return
        self._elapsed += self._tick
        self._refresh_header()
        self._refresh_table()

    def _refresh_header(self) -> None:
        aggregator = self._monitor.aggregator
        self.query_one("#header-display", HeaderDisplay).update_header(
            self._interface,
            aggregator.total_bytes_uploaded,
            aggregator.total_bytes_downloaded,
            self._unit_family,
            self._elapsed,
            self._paused,
        )

    def _refresh_table(self) -> None:
        """Refresh the traffic table."""
        table = self.query_one("#traffic-table", DataTable)
        rows = self._monitor.aggregator.process_rows
        download_max = max((max(r.download_history, default=0.0) for r in rows), default=0.0)
        upload_max = max((max(r.upload_history, default=0.0) for r in rows), default=0.0)
        table.clear()
        for row in rows:
            table.add_row(*self._row_cells(row, download_max, upload_max))

    def _row_cells(self, row: ProcessRow, download_max: float, upload_max: float) -> list[object]:
        widths = self._widths
        unit_family = self._unit_family

        def cell(value: int, rate: bool) -> Text:
            return Text(format_bandwidth(value, unit_family, rate=rate), justify="right")

        if self._chart == "line":
            down_chart = render_line(row.download_history, widths[5], color="cyan")
            up_chart = render_line(row.upload_history, widths[6], color="magenta")
        else:
            down_chart = render_bars(row.download_history, widths[5], download_max)
            up_chart = render_bars(row.upload_history, widths[6], upload_max)
        return [
            Text(truncate_to_width(row.process.name, widths[0])),
            cell(row.current_bytes_downloaded, rate=True),
            cell(row.current_bytes_uploaded, rate=True),
            cell(row.total_bytes_downloaded, rate=False),
            cell(row.total_bytes_uploaded, rate=False),
            down_chart,
            up_chart,
        ]

    def action_toggle_pause(self) -> None:
        """Freeze or resume the display."""
        self._paused = not self._paused
        self._refresh_header()
        self.query_one("#footer-display", FooterDisplay).update_footer(self._paused)
        if not self._paused:
            self._refresh_table()

    def action_clear(self) -> None:
        """Clear accumulated stats."""
        self._monitor.aggregator.clear()
        if self._paused:
            return
        self._refresh_header()
        self._refresh_table()
