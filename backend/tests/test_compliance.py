from decimal import Decimal

import pytest

from energyalloc.services.compliance import form_va_metrics, form_vb_metrics
from energyalloc.utils.decimal_math import money


PRODUCTION = [
    {"sk": "042024", "c1": 600, "c2": 400},
    {"sk": "052024", "c3": 1000},
    {"sk": "042023", "c1": 999},
    {"sk": "062024", "c1": 500, "status": "Inactive"},
]


def test_form_va_totals_and_site_norms() -> None:
    metrics = form_va_metrics(
        "2024-2025",
        production_rows=PRODUCTION,
        consumption_rows=[
            {"sk": "042024", "consumptionSiteId": "S1", "c1": 700},
            {"sk": "052024", "consumptionSiteId": "S2", "c2": 300},
        ],
        banking_rows=[{"sk": "042024", "c4": 100}],
        sites=[
            {"consumptionSiteId": "S1", "siteName": "Alpha", "allocationPercentage": 60},
            {"consumptionSiteId": "S2", "siteName": "Beta", "allocationPercentage": "40"},
        ],
    )
    assert metrics.financial_year == "2024-2025"
    assert metrics.total_generated_units == money("2000")
    assert metrics.auxiliary_consumption == money("100")
    assert metrics.banked_units == money("100")
    assert metrics.aggregate_generation == money("2000")
    assert metrics.percentage_51 == money("1020")
    assert metrics.actual_consumed_units == money("1000")
    assert metrics.percentage_adjusted == Decimal("50")

    alpha, beta = metrics.site_metrics
    assert alpha.annual_generation == money("1200")
    assert alpha.auxiliary_consumption == money("60")
    assert alpha.net_generation == money("1140")
    assert alpha.verification_criteria == money("581.40")
    assert alpha.meets_norms is True
    assert beta.verification_criteria == money("387.60")
    assert beta.total_consumption_units == money("300")
    assert beta.meets_norms is False


def test_form_va_without_generation_does_not_divide_by_zero() -> None:
    metrics = form_va_metrics(2024)
    assert metrics.aggregate_generation == 0
    assert metrics.percentage_adjusted == 0
    assert metrics.site_metrics == []


def test_form_vb_permitted_band() -> None:
    metrics = form_vb_metrics(
        "2024-2025",
        production_rows=PRODUCTION,
        allocation_rows=[
            {"sk": "042024", "consumptionSiteId": "S1", "c1": 550},
            {"sk": "072024", "consumptionSiteId": "S2", "c2": 100},
            {"sk": "042025", "consumptionSiteId": "S1", "c1": 1000},
        ],
        sites=[
            {"consumptionSiteId": "S1", "siteName": "Alpha", "equityShares": 60},
            {"consumptionSiteId": "S2", "siteName": "Beta", "equityShares": 40},
        ],
    )
    assert metrics.aggregate_generation == money("1900")
    assert metrics.percentage_51 == money("969")
    assert metrics.total_allocated_units == money("650")
    assert metrics.percentage_adjusted == Decimal("34.210526")

    alpha, beta = metrics.site_metrics
    assert alpha.permitted_consumption.with_zero == money("581.40")
    assert alpha.permitted_consumption.minus_10 == money("523.26")
    assert alpha.permitted_consumption.plus_10 == money("639.54")
    assert alpha.actual_consumption == money("550")
    assert alpha.norms_compliance is True
    assert beta.actual_consumption == money("100")
    assert beta.norms_compliance is False


def test_form_vb_custom_auxiliary_rate() -> None:
    metrics = form_vb_metrics("2024", production_rows=[{"sk": "012025", "c1": 1000}], auxiliary_rate="0.1")
    assert metrics.auxiliary_consumption == money("100")
    assert metrics.aggregate_generation == money("900")


def test_invalid_financial_year_is_rejected() -> None:
    with pytest.raises(ValueError):
        form_vb_metrics("2024-2026")
