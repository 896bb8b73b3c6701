"""
Revenue model detection — classify an idea by how it makes money.

The label is descriptive: it is echoed in the response and handed to the
narrative insights, but it does not change the scenario multipliers or the
cash-flow formula.

Rules are checked in order, first match wins:
  subscription  monetization mentions subscription / saas / monthly
  freemium      monetization or description mentions freemium
  marketplace   monetization mentions marketplace / commission
  advertising   monetization mentions advertising / adverts
  one_time      everything else
"""

from __future__ import annotations

from typing import Optional, Tuple

REVENUE_MODELS: Tuple[str, ...] = ("subscription", "freemium", "marketplace", "advertising", "one_time")

DEFAULT_REVENUE_MODEL = "one_time"

# Portuguese keywords are matched as well.
_SUBSCRIPTION = ("subscription", "saas", "monthly", "assinatura", "mensal")
_FREEMIUM = ("freemium",)
_MARKETPLACE = ("marketplace", "commission", "comissão")
_ADVERTISING = ("advertising", "advert", "publicidade", "anúncios")


def _mentions(text: str, keywords: Tuple[str, ...]) -> bool:
    return any(k in text for k in keywords)


def detect_revenue_model(monetization: Optional[str] = None, description: Optional[str] = None) -> str:
    """
    Return one of REVENUE_MODELS from free-text monetization and description.

    Parameters
    ----------
    monetization : str, optional
        How the idea charges ("monthly SaaS plan", "10% commission", ...)
    description : str, optional
        Only consulted for the freemium rule
    """
    money = (monetization or "").lower()
    desc = (description or "").lower()

    if _mentions(money, _SUBSCRIPTION):
        return "subscription"
    if _mentions(money, _FREEMIUM) or _mentions(desc, _FREEMIUM):
        return "freemium"
    if _mentions(money, _MARKETPLACE):
        return "marketplace"
    if _mentions(money, _ADVERTISING):
        return "advertising"
    return DEFAULT_REVENUE_MODEL
