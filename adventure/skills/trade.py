"""
Trade and Reward Skill.

Merchant pricing checks and the experience reward for defeating a
character.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from adventure.models.character import Character
    from adventure.models.item import Item


class TradeQuote(BaseModel):
    """Whether a trade can go ahead, and at what price."""

    price: int
    allowed: bool
    reason: str = ""


def buy_quote(buyer: Character, item: Item) -> TradeQuote:
    """Price for the player buying one unit from a merchant."""
    price = item.buy_price()
    if item.pricing is not None and not item.pricing.can_buy:
        return TradeQuote(price=price, allowed=False, reason="not_for_sale")
    if not buyer.wallet.can_afford(price):
        return TradeQuote(price=price, allowed=False, reason="insufficient_funds")
    return TradeQuote(price=price, allowed=True)


def sell_quote(merchant: Character, item: Item) -> TradeQuote:
    """Price a merchant pays the player for one unit."""
    price = item.sell_price()
    if not item.can_be_sold:
        return TradeQuote(price=price, allowed=False, reason="unsellable")
    if not merchant.wallet.can_afford(price):
        return TradeQuote(price=price, allowed=False, reason="merchant_funds")
    return TradeQuote(price=price, allowed=True)


def experience_for_defeat(defeated: Character) -> int:
    return defeated.level * 10 + defeated.max_health // 5
