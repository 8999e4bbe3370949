"""Box-office arithmetic: currency parsing, revenue reconciliation and profit.

All amounts are whole US dollars. TMDb reports *worldwide* revenue; OMDb only
reports a *domestic* (US) box-office string. When TMDb has no revenue figure
the domestic number may stand in for it, but it is always tagged as
domestic-only so the two are never presented interchangeably.

Profit and its ratios are never stored; they are recomputed from budget and
revenue every time they are requested.
"""

import enum
from typing import TYPE_CHECKING

from attrs import define

from .errors import ParseError

if TYPE_CHECKING:
    from .models.omdb import RatingsPayload


class RevenueScope(enum.Enum):
    WORLDWIDE = "worldwide"
    DOMESTIC = "domestic"


@define(frozen=True)
class RevenueFigure:
    """A revenue total together with where it came from."""

    amount: int
    scope: RevenueScope

    @property
    def is_domestic_only(self) -> bool:
        return self.scope is RevenueScope.DOMESTIC


def _clean(text: str) -> str:
    return "".join(ch for ch in text if ch not in "$," and not ch.isspace())


def parse_currency(text: str | None) -> int | None:
    """Parse an OMDb currency string like ``"$123,456,789"``.

    Returns ``None`` for missing, ``"N/A"`` or otherwise non-numeric input.
    """
    if text is None:
        return None
    cleaned = _clean(text)
    # isdigit() alone accepts superscripts and other digits int() rejects.
    if not (cleaned.isascii() and cleaned.isdigit()):
        return None
    return int(cleaned)


def parse_currency_strict(text: str | None) -> int:
    """Like :func:`parse_currency` but raises :class:`ParseError`."""
    amount = parse_currency(text)
    if amount is None:
        raise ParseError(f"Not a currency amount: {text!r}")
    return amount


def reconcile_revenue(
    revenue: int | None, ratings: "RatingsPayload | None"
) -> RevenueFigure | None:
    """Pick the revenue total to display.

    Worldwide revenue from TMDb wins whenever it is positive, unmodified by
    the ratings payload. Otherwise a parseable domestic box-office string is
    used and tagged domestic-only. ``None`` when neither is available.
    """
    if revenue and revenue > 0:
        return RevenueFigure(amount=revenue, scope=RevenueScope.WORLDWIDE)
    domestic = ratings.box_office_amount if ratings is not None else None
    if domestic is not None:
        return RevenueFigure(amount=domestic, scope=RevenueScope.DOMESTIC)
    return None


def revenue_breakdown(
    revenue: int | None, ratings: "RatingsPayload | None"
) -> dict[str, int | None]:
    """Split worldwide revenue into domestic and estimated international."""
    domestic = ratings.box_office_amount if ratings is not None else None
    if revenue and revenue > 0:
        international = max(0, revenue - domestic) if domestic is not None else None
        return {"domestic": domestic, "international": international}
    return {"domestic": domestic, "international": None}


def profit(budget: int | None, figure: RevenueFigure | None) -> int | None:
    if not budget or budget <= 0 or figure is None or figure.amount <= 0:
        return None
    return figure.amount - budget


def profit_margin(budget: int | None, figure: RevenueFigure | None) -> float | None:
    """Profit as a percentage of revenue."""
    net = profit(budget, figure)
    if net is None:
        return None
    return net / figure.amount * 100


def return_on_investment(
    budget: int | None, figure: RevenueFigure | None
) -> float | None:
    """Profit as a percentage of budget; only defined for profitable films."""
    net = profit(budget, figure)
    if net is None or net <= 0:
        return None
    return net / budget * 100


def format_currency(amount: int) -> str:
    """Compact dollar formatting: ``$1.2B``, ``$3.4M``, ``$5.6K``, ``$999``."""
    sign = "-" if amount < 0 else ""
    value = abs(amount)
    if value >= 1_000_000_000:
        return f"{sign}${value / 1_000_000_000:.1f}B"
    if value >= 1_000_000:
        return f"{sign}${value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{sign}${value / 1_000:.1f}K"
    return f"{sign}${value:,}"


def financials(
    budget: int | None, revenue: int | None, ratings: "RatingsPayload | None"
) -> dict:
    """Derived financial block for a movie detail response."""
    figure = reconcile_revenue(revenue, ratings)
    return {
        "budget": budget or None,
        "revenue": figure.amount if figure else None,
        "revenue_scope": figure.scope.value if figure else None,
        "domestic_only": figure.is_domestic_only if figure else False,
        "breakdown": revenue_breakdown(revenue, ratings),
        "profit": profit(budget, figure),
        "profit_margin": profit_margin(budget, figure),
        "return_on_investment": return_on_investment(budget, figure),
    }
