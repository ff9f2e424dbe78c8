# crosslist/services/expiry.py
"""
Listing expiry calculations.

Nothing here is cached: expiry is re-derived from the platform rule and the
listing date on every call, so there is no stored value that can go stale.
"""

from datetime import date, timedelta
from typing import Dict, Optional

from crosslist.core.expiry_rules import ExpiryRule, get_expiry_rule
from crosslist.core.utils import DateLike, to_date, today as current_day


def compute_expiry(
    platform: str,
    listed_date: DateLike,
    rules: Optional[Dict[str, ExpiryRule]] = None,
) -> Optional[date]:
    """
    Calendar day on which a listing expires.

    Returns None when the platform has no rule, the rule never expires
    (days == 0) or the listed date cannot be parsed.
    """
    rule = get_expiry_rule(platform, rules)
    if rule is None or rule.days == 0:
        return None
    listed = to_date(listed_date)
    if listed is None:
        return None
    return listed + timedelta(days=rule.days)


def days_until_expiry(
    platform: str,
    listed_date: DateLike,
    today: Optional[date] = None,
    rules: Optional[Dict[str, ExpiryRule]] = None,
) -> Optional[int]:
    """
    Signed days from today until expiry; negative means already expired,
    None means the listing does not expire.
    """
    expiry = compute_expiry(platform, listed_date, rules)
    if expiry is None:
        return None
    return (expiry - (today or current_day())).days
