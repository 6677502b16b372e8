from __future__ import annotations

from ..models.metrics import DashboardMetrics

"""Summary line rendering for the SUMMARY output of each refresh."""


def _format_number(value: float) -> str:
    """Render without scientific notation; integers lose their ``.0``."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_summary_line(metrics: DashboardMetrics, critical_count: int = 0) -> str:
    """Render a SUMMARY line from dashboard metrics.

    Format:
    SUMMARY products={total} low_stock={low} critical={critical} stock_value={value}

    Examples:
        >>> render_summary_line(DashboardMetrics(3, 1, 1250.5), critical_count=1)
        'SUMMARY products=3 low_stock=1 critical=1 stock_value=1250.5'
    """
    return (
        f"SUMMARY products={metrics.total_products} "
        f"low_stock={metrics.low_stock_count} "
        f"critical={critical_count} "
        f"stock_value={_format_number(metrics.stock_value)}"
    )
