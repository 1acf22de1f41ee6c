"""
Currency Models for the adventure engine.

A wallet stores a single normalized amount of base units; the economy
configuration decides how that amount is displayed.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class EconomyType(str, Enum):
    """How currency is displayed."""

    SIMPLE = "simple"
    TIERED = "tiered"


class TieredCurrencyNames(BaseModel):
    """Names and symbols for three-tier currency."""

    platinum: str = "Platinum"
    gold: str = "Gold"
    silver: str = "Silver"
    platinum_symbol: str = "💎"
    gold_symbol: str = "🪙"
    silver_symbol: str = "🥈"


class EconomyConfig(BaseModel):
    """Per-game economy settings."""

    enabled: bool = False
    type: EconomyType = EconomyType.SIMPLE
    currency_name: str = "Gold"
    currency_symbol: str = "💰"
    tiered_names: TieredCurrencyNames = Field(default_factory=TieredCurrencyNames)
    tier_conversion_rate: int = Field(default=100, ge=2)

    @classmethod
    def disabled(cls) -> EconomyConfig:
        return cls(enabled=False)

    @classmethod
    def simple(cls, currency_name: str, symbol: str = "💰") -> EconomyConfig:
        return cls(
            enabled=True,
            type=EconomyType.SIMPLE,
            currency_name=currency_name,
            currency_symbol=symbol,
        )

    @classmethod
    def tiered(
        cls,
        platinum_name: str = "Platinum",
        gold_name: str = "Gold",
        silver_name: str = "Silver",
        conversion_rate: int = 100,
    ) -> EconomyConfig:
        return cls(
            enabled=True,
            type=EconomyType.TIERED,
            tiered_names=TieredCurrencyNames(
                platinum=platinum_name,
                gold=gold_name,
                silver=silver_name,
            ),
            tier_conversion_rate=conversion_rate,
        )


def split_tiers(amount: int, rate: int = 100) -> tuple[int, int, int]:
    """Split base units into (platinum, gold, silver)."""
    platinum_units = rate * rate
    platinum, remaining = divmod(amount, platinum_units)
    gold, silver = divmod(remaining, rate)
    return platinum, gold, silver


def format_amount(amount: int, config: EconomyConfig) -> str:
    """
    Format a price for display.

    Tiered amounts omit empty tiers but always show at least one.
    Returns an empty string when the economy is disabled.
    """
    if not config.enabled:
        return ""

    if config.type == EconomyType.SIMPLE:
        return f"{config.currency_symbol} {amount:,} {config.currency_name}"

    names = config.tiered_names
    platinum, gold, silver = split_tiers(amount, config.tier_conversion_rate)
    parts = []
    if platinum > 0:
        parts.append(f"{platinum} {names.platinum}")
    if gold > 0:
        parts.append(f"{gold} {names.gold}")
    if silver > 0 or not parts:
        parts.append(f"{silver} {names.silver}")
    return ", ".join(parts)


class Wallet(BaseModel):
    """A character's money, in base units."""

    total: int = Field(default=0, ge=0)

    def add(self, amount: int) -> None:
        if amount > 0:
            self.total += amount

    def add_tiered(self, platinum: int = 0, gold: int = 0, silver: int = 0, rate: int = 100) -> None:
        self.add(platinum * rate * rate + gold * rate + silver)

    def remove(self, amount: int) -> bool:
        """Remove funds; returns False without changing anything if short."""
        if amount < 0 or self.total < amount:
            return False
        self.total -= amount
        return True

    def can_afford(self, amount: int) -> bool:
        return self.total >= amount

    def take_all(self) -> int:
        """Empty the wallet and return what was in it."""
        amount, self.total = self.total, 0
        return amount

    def format(self, config: EconomyConfig) -> str:
        """Format the balance with symbols for the status footer."""
        if not config.enabled:
            return ""
        if config.type == EconomyType.SIMPLE:
            return format_amount(self.total, config)

        names = config.tiered_names
        platinum, gold, silver = split_tiers(self.total, config.tier_conversion_rate)
        parts = []
        if platinum > 0:
            parts.append(f"{names.platinum_symbol} {platinum} {names.platinum}")
        if gold > 0 or platinum > 0:
            parts.append(f"{names.gold_symbol} {gold} {names.gold}")
        parts.append(f"{names.silver_symbol} {silver} {names.silver}")
        return ", ".join(parts)
