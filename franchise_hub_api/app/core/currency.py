"""
Rupee formatting helpers.

Amounts are shown with Indian digit grouping: the last three digits form
one group, then groups of two (``12,34,567``).
"""

from .config import settings


CURRENCY_SYMBOL = "₹"
CURRENCY_CODE = settings.currency

LAKH = 100_000
CRORE = 10_000_000


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_currency(amount: float, show_decimals: bool = False) -> str:
    """Format ``amount`` as rupees, e.g. ``format_currency(120000)`` gives ``₹1,20,000``.

    Without ``show_decimals`` the amount is rounded to whole rupees.
    """
    sign = "-" if amount < 0 else ""
    value = abs(amount)
    if show_decimals:
        whole, fraction = f"{value:.2f}".split(".")
        return f"{sign}{CURRENCY_SYMBOL}{_group_indian(whole)}.{fraction}"
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(str(int(round(value))))}"


def format_currency_compact(amount: float, compact: bool = False) -> str:
    """Short form for dashboards: ``₹1.2L`` for lakhs, ``₹1.0Cr`` for crores.

    Only applied when ``compact`` is set; otherwise, and for amounts below
    one lakh, the result is the same as ``format_currency``.
    """
    if compact and amount >= LAKH:
        if amount >= CRORE:
            return f"{CURRENCY_SYMBOL}{amount / CRORE:.1f}Cr"
        return f"{CURRENCY_SYMBOL}{amount / LAKH:.1f}L"
    return format_currency(amount)
