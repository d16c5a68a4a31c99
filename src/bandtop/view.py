"""Display rows and the raw text projection of aggregated traffic."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from bandtop.aggregator import NetworkData, ProcessHistory
    from bandtop.connections import ProcessInfo


@dataclass(frozen=True)
class ProcessRow:
    """One process as shown in a single frame."""

    process: ProcessInfo
    current_bytes_downloaded: int
    current_bytes_uploaded: int
    total_bytes_downloaded: int
    total_bytes_uploaded: int
    download_history: tuple[float, ...]
    upload_history: tuple[float, ...]

    @property
    def has_current_traffic(self) -> bool:
        return self.current_bytes_downloaded > 0 or self.current_bytes_uploaded > 0


def row_sort_key(row: ProcessRow) -> tuple[int, str, int]:
    """Biggest downloaders first, then by process identity."""
    return (-row.total_bytes_downloaded, row.process.name, row.process.pid)


def build_rows(
    histories: Mapping[ProcessInfo, ProcessHistory],
    current: Mapping[ProcessInfo, NetworkData],
    limit: int,
) -> list[ProcessRow]:
    """Build sorted rows for every retained process, keeping at most ``limit``."""
    rows = []
    for proc_info, history in histories.items():
        data = current.get(proc_info)
        rows.append(
            ProcessRow(
                process=proc_info,
                current_bytes_downloaded=data.total_bytes_downloaded if data else 0,
                current_bytes_uploaded=data.total_bytes_uploaded if data else 0,
                total_bytes_downloaded=history.total_bytes_downloaded,
                total_bytes_uploaded=history.total_bytes_uploaded,
                download_history=tuple(history.download_history),
                upload_history=tuple(history.upload_history),
            )
        )
    rows.sort(key=row_sort_key)
    return rows[:limit]


def output_text(
    rows: list[ProcessRow],
    emit: Callable[[str], object],
    timestamp: int | None = None,
) -> None:
    """Write one refresh of machine friendly output, one line per ``emit`` call."""
    if timestamp is None:
        timestamp = int(time.time())
    emit("Refreshing:")
    if any(row.has_current_traffic for row in rows):
        for row in rows:
            emit(
                f'process: <{timestamp}> "{row.process.name}" '
                f"down/up Bps: {row.current_bytes_downloaded}/{row.current_bytes_uploaded} "
                f"total down/up B: {row.total_bytes_downloaded}/{row.total_bytes_uploaded}"
            )
    else:
        emit("<NO TRAFFIC>")
    emit("")
