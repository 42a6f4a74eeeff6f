"""Display formatting for calculator results."""

from typing import Optional


def format_currency(value: float) -> str:
    """Format dollars without cents, e.g. -$1,234."""
    if value < 0:
        return f"-${abs(value):,.0f}"
    return f"${value:,.0f}"


def format_number(value: float, decimals: int = 0) -> str:
    return f"{value:,.{decimals}f}"


def format_percentage(fraction: float, decimals: int = 0) -> str:
    """Format a fraction (0.3) as a percentage (30%)."""
    return f"{fraction * 100:.{decimals}f}%"


def format_payback(years: Optional[float]) -> str:
    if years is None:
        return "Never"
    return f"{years:.1f} years"
