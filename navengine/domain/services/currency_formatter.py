"""
CURRENCY FORMATTER
Render sats amounts for display in BTC or USD

All functions are total: any input yields a string, never an exception and
never "NaN". A missing or unusable exchange rate renders in BTC/sats.
"""

import dataclasses
import logging
import math
from typing import Optional, Union

from navengine.domain.models import CurrencyMode, NAVSnapshot
from navengine.utils.numbers import SATS_PER_BTC, is_finite_number, round_half_up

logger = logging.getLogger(__name__)

BTC_SYMBOL = "₿"
USD_SYMBOL = "$"

# Native thresholds (sats)
SATS_THOUSANDS = 1_000
SATS_MILLIONS = 1_000_000
SATS_BTC_PIVOT = 10_000_000

# Fiat thresholds (USD)
USD_WHOLE = 100
USD_THOUSANDS = 1_000
USD_MILLIONS = 1_000_000

ModeLike = Union[CurrencyMode, str]


def coerce_mode(mode: Optional[ModeLike]) -> CurrencyMode:
    """Map "btc"/"usd" (or a CurrencyMode) to CurrencyMode; unknown -> NATIVE"""
    if isinstance(mode, CurrencyMode):
        return mode
    if isinstance(mode, str):
        try:
            return CurrencyMode(mode.strip().lower())
        except ValueError:
            return CurrencyMode.NATIVE
    return CurrencyMode.NATIVE


def usable_rate(exchange_rate: object) -> bool:
    return is_finite_number(exchange_rate) and exchange_rate > 0


def _sanitize_amount(amount: object) -> float:
    if not is_finite_number(amount):
        return 0
    return max(0, amount)


def _format_native(sats: float) -> str:
    if sats >= SATS_BTC_PIVOT:
        return f"{BTC_SYMBOL}{sats / SATS_PER_BTC:.2f}"
    if sats >= SATS_MILLIONS:
        return f"{sats / SATS_MILLIONS:.2f}M sats"
    if sats >= SATS_THOUSANDS:
        return f"{sats / SATS_THOUSANDS:.1f}k sats"
    return f"{int(math.floor(sats))} sats"


def _format_fiat(sats: float, exchange_rate: float) -> Optional[str]:
    usd = sats / SATS_PER_BTC * exchange_rate
    if not math.isfinite(usd):
        return None
    if usd >= USD_MILLIONS:
        return f"{USD_SYMBOL}{usd / USD_MILLIONS:.2f}M"
    if usd >= USD_THOUSANDS:
        return f"{USD_SYMBOL}{usd / USD_THOUSANDS:.1f}k"
    if usd >= USD_WHOLE:
        return f"{USD_SYMBOL}{round_half_up(usd)}"
    return f"{USD_SYMBOL}{usd:.2f}"


def format_value(
    amount_sats: object,
    mode: Optional[ModeLike] = CurrencyMode.NATIVE,
    exchange_rate: Optional[float] = None,
) -> str:
    """
    Format a sats amount.

    Args:
        amount_sats: Amount in sats; non-finite or negative renders as 0
        mode: CurrencyMode or "btc"/"usd"
        exchange_rate: USD per BTC, required for USD output

    Returns:
        e.g. "842 sats", "1.5k sats", "2.50M sats", "₿1.00", "$50.00k"
    """
    try:
        sats = _sanitize_amount(amount_sats)
        if coerce_mode(mode) == CurrencyMode.FIAT and usable_rate(exchange_rate):
            rendered = _format_fiat(sats, float(exchange_rate))
            if rendered is not None:
                return rendered
        return _format_native(sats)
    except (OverflowError, TypeError, ValueError) as exc:
        logger.debug("format_value fell back to zero for %r: %s", amount_sats, exc)
        return "0 sats"


def format_change(change_pct: object) -> str:
    """Signed percentage with 2 decimals, e.g. "+5.00%" / "-40.00%" """
    if not is_finite_number(change_pct):
        return "0.00%"
    if change_pct == 0:
        change_pct = 0.0  # drop the sign of -0.0
    formatted = f"{change_pct:.2f}"
    return f"+{formatted}%" if change_pct >= 0 else f"{formatted}%"


def format_token_amount(amount: object) -> str:
    if not is_finite_number(amount) or amount < 0:
        return "0 tokens"
    if amount >= 1_000_000:
        return f"{amount / 1_000_000:.2f}M tokens"
    if amount >= 1_000:
        return f"{int(amount // 1_000)}k tokens"
    return f"{int(math.floor(amount))} tokens"


def truncate_address(address: Optional[str], start_chars: int = 6, end_chars: int = 4) -> str:
    if not address:
        return ""
    if len(address) <= start_chars + end_chars:
        return address
    return f"{address[:start_chars]}...{address[len(address) - end_chars:]}"


def price_per_token_in_usd(total_sats: object, token_supply: object, exchange_rate: object) -> Optional[float]:
    """NAV in USD divided by the token supply; None without a usable rate or supply"""
    if not usable_rate(exchange_rate) or not is_finite_number(token_supply) or token_supply <= 0:
        return None
    nav_usd = _sanitize_amount(total_sats) / SATS_PER_BTC * exchange_rate
    per_token = nav_usd / token_supply
    return per_token if math.isfinite(per_token) else None


def render_snapshot(
    snapshot: NAVSnapshot,
    mode: Optional[ModeLike],
    exchange_rate: Optional[float] = None,
) -> NAVSnapshot:
    """
    Fill the display fields of a snapshot.

    `currency` on the result is the mode actually rendered: FIAT falls back
    to NATIVE when no usable rate is known.
    """
    requested = coerce_mode(mode)
    rate = float(exchange_rate) if usable_rate(exchange_rate) else None

    formatted_native = format_value(snapshot.total_current_value, CurrencyMode.NATIVE)
    formatted_fiat = None
    price_per_token_usd = None
    if rate is not None:
        formatted_fiat = format_value(snapshot.total_current_value, CurrencyMode.FIAT, rate)
        price_per_token_usd = price_per_token_in_usd(snapshot.total_current_value, snapshot.token_supply, rate)

    if requested == CurrencyMode.FIAT and formatted_fiat is not None:
        rendered_mode, display_value = CurrencyMode.FIAT, formatted_fiat
    else:
        if requested == CurrencyMode.FIAT:
            logger.info("No exchange rate available; rendering NAV in BTC")
        rendered_mode, display_value = CurrencyMode.NATIVE, formatted_native

    return dataclasses.replace(
        snapshot,
        currency=rendered_mode,
        display_value=display_value,
        formatted_native=formatted_native,
        formatted_fiat=formatted_fiat,
        exchange_rate=rate,
        price_per_token_usd=price_per_token_usd,
    )
