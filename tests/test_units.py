"""Tests for bandwidth formatting."""

from __future__ import annotations

import pytest

from bandtop.units import UnitFamily, format_bandwidth, scale_for


class TestFormatBandwidth:
    """Test the four unit families."""

    @pytest.mark.parametrize(
        ("value", "family", "expected"),
        [
            (0, UnitFamily.BIN_BYTES, "0.00B"),
            (512, UnitFamily.BIN_BYTES, "512.00B"),
            (1536, UnitFamily.BIN_BYTES, "1.50KiB"),
            (3 * 1024**2, UnitFamily.BIN_BYTES, "3.00MiB"),
            (128, UnitFamily.BIN_BITS, "1.00Kib"),
            (100, UnitFamily.BIN_BITS, "800.00b"),
            (999, UnitFamily.SI_BYTES, "999.00B"),
            (1_000_000, UnitFamily.SI_BYTES, "1.00MB"),
            (2_500, UnitFamily.SI_BYTES, "2.50kB"),
            (1_000, UnitFamily.SI_BITS, "8.00kb"),
            (125_000_000, UnitFamily.SI_BITS, "1.00Gb"),
        ],
    )
    def test_totals(self, value, family, expected):
        """Totals are scaled to the largest fitting unit."""
        assert format_bandwidth(value, family) == expected

    def test_rate_appends_per_second(self):
        """Rates carry a /s suffix, totals do not."""
        assert format_bandwidth(1536, UnitFamily.BIN_BYTES, rate=True) == "1.50KiB/s"
        assert format_bandwidth(1536, UnitFamily.BIN_BYTES) == "1.50KiB"

    def test_values_past_last_unit_stay_in_last_unit(self):
        """Huge values keep the largest suffix instead of running off the table."""
        assert format_bandwidth(1024**7, UnitFamily.BIN_BYTES) == "1048576.00PiB"

    def test_fractional_values_use_first_unit(self):
        """Values below one byte use the base unit."""
        assert format_bandwidth(0.5, UnitFamily.SI_BYTES) == "0.50B"


class TestUnitFamily:
    """Test unit family properties."""

    def test_cli_values(self):
        """Families parse from their command line names."""
        assert UnitFamily("bin-bytes") is UnitFamily.BIN_BYTES
        assert UnitFamily("si-bits") is UnitFamily.SI_BITS

    def test_scale_for_boundary(self):
        """A value exactly at a unit boundary uses that unit."""
        assert scale_for(1024.0, UnitFamily.BIN_BYTES) == (1024.0, "KiB")
        assert scale_for(1023.0, UnitFamily.BIN_BYTES) == (1.0, "B")

    def test_bit_families_multiply_by_eight(self):
        assert UnitFamily.BIN_BITS.multiplier == 8
        assert UnitFamily.SI_BYTES.multiplier == 1
