"""Display formatting for amounts shown in reasons and summaries"""

from typing import Optional


def format_amount(amount: float) -> str:
    """Thousands-separated, at most three decimals, trailing zeros dropped (150000.5 -> '150,000.5')"""
    return f"{amount:,.3f}".rstrip("0").rstrip(".")


def format_currency(amount: Optional[float]) -> str:
    """Whole-dollar display; the calculators themselves never round"""
    if not amount:
        return "$0"
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"
