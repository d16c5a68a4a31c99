"""Human-readable formatting of byte rates and totals."""

from __future__ import annotations

from enum import Enum

PRECISION = 2


class UnitFamily(Enum):
    """Display convention for rates and totals."""

    BIN_BYTES = "bin-bytes"
    BIN_BITS = "bin-bits"
    SI_BYTES = "si-bytes"
    SI_BITS = "si-bits"

    @property
    def multiplier(self) -> int:
        """Factor applied to a byte count before scaling."""
        if self in (UnitFamily.BIN_BITS, UnitFamily.SI_BITS):
            return 8
        return 1

    @property
    def base(self) -> float:
        """Step between consecutive units."""
        if self in (UnitFamily.BIN_BYTES, UnitFamily.BIN_BITS):
            return 1024.0
        return 1000.0

    @property
    def suffixes(self) -> tuple[str, ...]:
        return _SUFFIXES[self]


_SUFFIXES: dict[UnitFamily, tuple[str, ...]] = {
    UnitFamily.BIN_BYTES: ("B", "KiB", "MiB", "GiB", "TiB", "PiB"),
    UnitFamily.BIN_BITS: ("b", "Kib", "Mib", "Gib", "Tib", "Pib"),
    UnitFamily.SI_BYTES: ("B", "kB", "MB", "GB", "TB", "PB"),
    UnitFamily.SI_BITS: ("b", "kb", "Mb", "Gb", "Tb", "Pb"),
}


def scale_for(value: float, unit_family: UnitFamily) -> tuple[float, str]:
    """Pick the divisor and suffix for an already multiplied value.

    The largest unit whose divisor does not exceed the value wins. Values
    below one base unit stay in the first unit and values past the last
    unit stay in the last one.
    """
    divisor = 1.0
    suffix = unit_family.suffixes[0]
    for step, candidate in enumerate(unit_family.suffixes):
        step_divisor = unit_family.base**step
        if value < step_divisor:
            break
        divisor = step_divisor
        suffix = candidate
    return divisor, suffix


def format_bandwidth(value: float, unit_family: UnitFamily, rate: bool = False) -> str:
    """Format a byte count (or per-second byte rate) as a string.

    >>> format_bandwidth(1536, UnitFamily.BIN_BYTES, rate=True)
    '1.50KiB/s'
    """
    scaled = float(value) * unit_family.multiplier
    divisor, suffix = scale_for(scaled, unit_family)
    text = f"{scaled / divisor:.{PRECISION}f}{suffix}"
    if rate:
        return f"{text}/s"
    return text
