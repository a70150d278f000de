"""Markup application on supplier packages."""

from __future__ import annotations

from decimal import Decimal

import pytest

from hotel_api.core.errors import MarkupError
from hotel_api.models import AppConfig
from hotel_api.services.markup_service import MarkupRule, add_markup


def test_percentage_markup_sets_prices() -> None:
    rule = MarkupRule(
        markup_type="percentage",
        markup_value=Decimal("10"),
        service_charge=Decimal("50"),
        processing_fee_percentage=Decimal("2"),
        gst_percentage=Decimal("18"),
    )
    package = {"booking_key": "bk", "chargeable_rate": "1000"}

    priced = add_markup(package, rule)

    assert priced is package
    assert package["markup"] == 100.0
    assert package["base_amount"] == 1100.0
    assert package["service_charge"] == 50.0
    assert package["processing_fee"] == 22.0
    assert package["gst"] == 210.96
    assert package["room_rate"] == 1000.0
    assert package["client_commission"] == 0


def test_fixed_markup_keeps_supplier_fees() -> None:
    rule = MarkupRule(markup_type="fixed", markup_value=Decimal("250"))
    package = {"chargeable_rate": 800, "service_charge": 40, "gst": 5, "room_rate": 700}

    add_markup(package, rule)

    assert package["base_amount"] == 1050.0
    assert package["service_charge"] == 40.0
    assert package["gst"] == 5.0
    assert package["room_rate"] == 700


@pytest.mark.parametrize("rate", [None, "", "n/a", -10])
def test_unusable_chargeable_rate(rate) -> None:
    with pytest.raises(MarkupError):
        add_markup({"chargeable_rate": rate}, MarkupRule())


def test_rule_defaults_without_config() -> None:
    assert MarkupRule.from_config(None) == MarkupRule()


def test_rule_from_config_row() -> None:
    config = AppConfig(
        markup={"type": "fixed", "value": 120},
        fees={"service_charge": 25, "gst_percentage": 18},
    )
    rule = MarkupRule.from_config(config)
    assert rule.markup_type == "fixed"
    assert rule.markup_value == Decimal("120")
    assert rule.service_charge == Decimal("25")
    assert rule.gst_percentage == Decimal("18")
