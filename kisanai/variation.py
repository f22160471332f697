"""Deterministic display variation for market figures.

Market pages show figures that look freshly adjusted for the selected
insight mode yet stay identical across reloads, since nothing is stored
server-side. Every adjustment is a pure function of a string identifier:
a 32-bit rolling hash picks a factor inside a per-mode, per-field band.
"""

from __future__ import annotations

import math
import re
from enum import StrEnum

from kisanai.schemas.audit import MarketData


class InsightMode(StrEnum):
    """How market figures are presented."""

    ACCURATE = "Accurate"
    ESTIMATE = "Estimate"
    REALTIME = "Realtime"
    PREDICTIVE = "Predictive"


class FieldFamily(StrEnum):
    """Kind of figure being adjusted; each has its own variation band."""

    TRADING_VOLUME = "trading_volume"  # crore rupees
    PRICE_PER_QUINTAL = "price_per_quintal"
    COUNT = "count"


# Maximum relative deviation per field family and mode. Accurate is always 0.
VARIATION_TABLE: dict[FieldFamily, dict[InsightMode, float]] = {
    FieldFamily.TRADING_VOLUME: {
        InsightMode.ESTIMATE: 0.05,
        InsightMode.REALTIME: 0.03,
        InsightMode.PREDICTIVE: 0.08,
    },
    FieldFamily.PRICE_PER_QUINTAL: {
        InsightMode.ESTIMATE: 0.06,
        InsightMode.REALTIME: 0.04,
        InsightMode.PREDICTIVE: 0.10,
    },
    FieldFamily.COUNT: {
        InsightMode.ESTIMATE: 0.08,
        InsightMode.REALTIME: 0.05,
        InsightMode.PREDICTIVE: 0.08,
    },
}

# Predictive figures lean upward on top of the hash factor
PREDICTIVE_BIAS: dict[FieldFamily, float] = {
    FieldFamily.TRADING_VOLUME: 1.05,
    FieldFamily.PRICE_PER_QUINTAL: 1.04,
    FieldFamily.COUNT: 1.05,
}

_MODE_SUFFIX: dict[InsightMode, str] = {
    InsightMode.REALTIME: "-rt",
    InsightMode.PREDICTIVE: "-pd",
}

MIN_QUINTAL_PRICE = 400
MAX_QUINTAL_PRICE = 65000
MIN_DIVERSIFIED_PRICE = 500

_NON_DIGIT_RE = re.compile(r"[^0-9]")
_NON_DECIMAL_RE = re.compile(r"[^0-9.]")
_FLOAT_PREFIX_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def js_round(value: float) -> int:
    """Round half up, the way the web client rounds display numbers."""
    return math.floor(value + 0.5)


def string_hash(text: str) -> int:
    """32-bit signed rolling hash (h * 31 + c) over UTF-16 code units."""
    data = text.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def deterministic_factor(identifier: str, max_delta: float) -> float:
    """Map identifier to a factor in [1 - max_delta, 1 + max_delta)."""
    normalized = (abs(string_hash(identifier)) % 1000) / 1000
    return 1 + (normalized * 2 - 1) * max_delta


def variation_factor(
    identifier: str,
    mode: InsightMode,
    family: FieldFamily = FieldFamily.COUNT,
) -> float:
    """Bounded factor for one figure. Exactly 1.0 in Accurate mode."""
    if mode is InsightMode.ACCURATE:
        return 1.0
    return deterministic_factor(identifier, VARIATION_TABLE[family][mode])


def build_identifier(crop: str | None, market: str | None, mode: InsightMode) -> str:
    return f"{crop or 'generic'}-{market or 'market'}-{mode.value}{_MODE_SUFFIX.get(mode, '')}"


def format_indian(amount: int) -> str:
    """Group digits the Indian way: 1234567 -> '12,34,567'."""
    digits = str(abs(amount))
    sign = "-" if amount < 0 else ""
    if len(digits) <= 3:
        return sign + digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return sign + ",".join([*groups, tail])


def _display_factor(identifier: str, mode: InsightMode, family: FieldFamily) -> float:
    factor = variation_factor(identifier, mode, family)
    if mode is InsightMode.PREDICTIVE:
        factor *= PREDICTIVE_BIAS[family]
    return factor


def adjust_display_value(
    value: str | int | float,
    mode: InsightMode,
    crop: str | None = None,
    market: str | None = None,
) -> str:
    """Adjust a market figure for display in the given mode.

    Strings containing "Cr" are trading volumes, strings containing
    "/quintal" are prices (clamped to a sane range), plain numbers are
    counts. Other strings, and strings with no number in them, are
    returned unchanged.
    """
    identifier = build_identifier(crop, market, mode)

    if isinstance(value, str):
        if "Cr" in value:
            match = _FLOAT_PREFIX_RE.match(_NON_DECIMAL_RE.sub("", value))
            if not match:
                return value
            factor = _display_factor(identifier, mode, FieldFamily.TRADING_VOLUME)
            adjusted = float(match.group()) * factor
            return f"₹{format_indian(max(0, js_round(adjusted)))} Cr"

        if "/quintal" in value:
            digits = _NON_DIGIT_RE.sub("", value)
            if not digits or int(digits) == 0:
                return value
            factor = _display_factor(identifier, mode, FieldFamily.PRICE_PER_QUINTAL)
            adjusted = min(MAX_QUINTAL_PRICE, max(MIN_QUINTAL_PRICE, int(digits) * factor))
            return f"₹{format_indian(js_round(adjusted))}/quintal"

        return value

    factor = _display_factor(identifier, mode, FieldFamily.COUNT)
    return format_indian(max(0, js_round((value or 0) * factor)))


def diversify_market_prices(city_data: MarketData) -> MarketData:
    """Spread crop prices across a city's markets by up to ±3%, deterministically.

    Returns a new MarketData; the input is not modified.
    """
    diversified = city_data.model_copy(deep=True)
    for market in diversified.markets:
        prices: dict[str, str] = {}
        for crop, price in market.crop_prices.items():
            digits = _NON_DIGIT_RE.sub("", price)
            base = int(digits) if digits else 0
            if not base:
                prices[crop] = price
                continue
            seed = string_hash(f"{city_data.city}-{market.name}-{crop}")
            variation = (abs(seed) % 7 - 3) / 100
            adjusted = max(MIN_DIVERSIFIED_PRICE, js_round(base * (1 + variation)))
            prices[crop] = f"₹{format_indian(adjusted)}/quintal"
        market.crop_prices = prices
    return diversified
