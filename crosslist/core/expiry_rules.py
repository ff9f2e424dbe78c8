"""
Per-platform listing expiry rules.

`days` is how long a listing stays live before the marketplace ends it;
0 means it stays up until sold or removed (GTC style) and no expiry is tracked.
`renewable` says whether the marketplace lets the seller renew the same listing.
"""

from typing import Dict, NamedTuple, Optional


class ExpiryRule(NamedTuple):
    days: int
    renewable: bool
    label: str = ""


PLATFORM_EXPIRY_RULES: Dict[str, ExpiryRule] = {
    "eBay":                 ExpiryRule(30,  True,  "30-day or GTC"),
    "Amazon":               ExpiryRule(0,   False, "Until sold/removed"),
    "Etsy":                 ExpiryRule(120, True,  "4-month listing"),
    "Facebook Marketplace": ExpiryRule(7,   True,  "7-day listing"),
    "Depop":                ExpiryRule(0,   False, "Until sold/removed"),
    "Poshmark":             ExpiryRule(0,   False, "Active until sold (share to refresh)"),
    "Mercari":              ExpiryRule(0,   False, "Until sold/removed"),
    "Grailed":              ExpiryRule(0,   False, "Until sold/removed"),
    "StockX":               ExpiryRule(30,  True,  "30-day ask"),
    "GOAT":                 ExpiryRule(30,  True,  "30-day listing"),
    "Vinted":               ExpiryRule(0,   False, "Until sold/removed"),
    "Tradesy":              ExpiryRule(0,   False, "Until sold/removed"),
    "The RealReal":         ExpiryRule(0,   False, "Consignment period"),
    "Vestiaire Collective": ExpiryRule(0,   False, "Until sold/removed"),
    "Reverb":               ExpiryRule(0,   False, "Until sold/removed"),
    "Discogs":              ExpiryRule(0,   False, "Until sold/removed"),
    "Craigslist":           ExpiryRule(45,  True,  "45-day listing"),
    "OfferUp":              ExpiryRule(0,   False, "Until sold/removed"),
    "Nextdoor":             ExpiryRule(30,  True,  "30-day listing"),
    "Whatnot":              ExpiryRule(0,   False, "Live auction"),
    "TikTok Shop":          ExpiryRule(0,   False, "Until sold/removed"),
    "Instagram":            ExpiryRule(0,   False, "Until sold/removed"),
    "Shopify":              ExpiryRule(0,   False, "Until sold/removed"),
    "Walmart Marketplace":  ExpiryRule(0,   False, "Until sold/removed"),
    "Newegg":               ExpiryRule(0,   False, "Until sold/removed"),
    "Bonanza":              ExpiryRule(0,   False, "Until sold/removed"),
    "Ruby Lane":            ExpiryRule(0,   False, "Until sold/removed"),
    "Chairish":             ExpiryRule(0,   False, "Until sold/removed"),
    "1stDibs":              ExpiryRule(0,   False, "Until sold/removed"),
    "Swappa":               ExpiryRule(30,  True,  "30-day listing"),
    "Decluttr":             ExpiryRule(0,   False, "Until sold/removed"),
}


def get_expiry_rule(platform: str, rules: Optional[Dict[str, ExpiryRule]] = None) -> Optional[ExpiryRule]:
    """Rule for a platform, or None for platforms with no known rule."""
    table = PLATFORM_EXPIRY_RULES if rules is None else rules
    return table.get(platform)
