"""Tests for the step-size table and quantization helpers."""

from decimal import Decimal

import pytest

from cryptodeck.sizing import StepSizeResolver, display_places, floor_to_step, format_quantity
from cryptodeck.sizing.step_size import DEFAULT_STEP_SIZE


class TestResolve:
    @pytest.mark.parametrize(
        "symbol, step",
        [
            ("BTCUSDT", "0.000001"),
            ("ETHUSDT", "0.0001"),
            ("XRPUSDT", "0.1"),
            ("DOGEUSDT", "1"),
            ("LINKUSDT", "0.01"),
        ],
    )
    def test_known_symbols(self, symbol, step):
        assert StepSizeResolver().resolve(symbol) == Decimal(step)

    def test_lookup_is_case_insensitive(self):
        assert StepSizeResolver().resolve(" btcusdt") == Decimal("0.000001")

    def test_unknown_symbol_gets_default(self):
        assert StepSizeResolver().resolve("PEPEUSDT") == DEFAULT_STEP_SIZE == Decimal("0.0001")

    def test_empty_symbol_is_rejected(self):
        with pytest.raises(ValueError):
            StepSizeResolver().resolve("  ")

    def test_overrides_and_default(self):
        resolver = StepSizeResolver(overrides={"pepeusdt": Decimal("1000")}, default=Decimal("0.001"))
        assert resolver.resolve("PEPEUSDT") == Decimal("1000")
        assert resolver.resolve("FOOUSDT") == Decimal("0.001")
        assert resolver.resolve("BTCUSDT") == Decimal("0.000001")

    @pytest.mark.parametrize("bad", [Decimal("0"), Decimal("-0.1")])
    def test_non_positive_steps_are_rejected(self, bad):
        with pytest.raises(ValueError):
            StepSizeResolver(overrides={"BTCUSDT": bad})
        with pytest.raises(ValueError):
            StepSizeResolver(default=bad)


class TestQuantize:
    def test_floor_to_step(self):
        assert floor_to_step(Decimal("247.6"), Decimal("1")) == Decimal("247")
        assert floor_to_step(Decimal("0.0199999"), Decimal("0.0001")) == Decimal("0.0199")
        assert floor_to_step(Decimal("0.3"), Decimal("0.1")) == Decimal("0.3")

    def test_resolver_quantize_and_grid_check(self):
        resolver = StepSizeResolver()
        assert resolver.quantize("XRPUSDT", Decimal("12.39")) == Decimal("12.3")
        assert resolver.is_on_grid("XRPUSDT", Decimal("12.3"))
        assert not resolver.is_on_grid("XRPUSDT", Decimal("12.35"))


class TestDisplay:
    @pytest.mark.parametrize(
        "step, places",
        [("0.000001", 3), ("0.0001", 3), ("0.001", 3), ("0.01", 2), ("0.1", 2), ("1", 2)],
    )
    def test_display_places_keyed_off_magnitude(self, step, places):
        assert display_places(Decimal(step)) == places

    def test_format_quantity(self):
        assert format_quantity(Decimal("0.015"), Decimal("0.000001")) == "0.015"
        assert format_quantity(Decimal("0.1235"), Decimal("0.0001")) == "0.123"
        assert format_quantity(Decimal("247"), Decimal("1")) == "247.00"
        assert format_quantity(Decimal("0"), Decimal("0.01")) == "0.00"

    def test_format_quantity_never_reads_above_quantity(self):
        assert format_quantity(Decimal("0.012999"), Decimal("0.000001")) == "0.012"
        assert format_quantity(Decimal("2.999"), Decimal("0.01")) == "2.99"
