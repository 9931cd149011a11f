"""INR funding amount extraction.

Each regional notation has its own strategy; the parser walks them in order and the
first strategy yielding a finite amount wins.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from pipelines.io.schemas import FundingAmount

logger = logging.getLogger("pipelines.leads.funding_parser")

RUPEES_PER_LAKH = Decimal(100_000)
RUPEES_PER_CRORE = Decimal(10_000_000)

FOREIGN_CURRENCY_REGEX = re.compile(r"[€£$]")
_NUMBER = r"\d{1,3}(?:,\d{2,3})+(?:\.\d+)?|\d+(?:\.\d+)?"
_RUPEE_PREFIX = r"(?:₹|\bINR|\bRs\.?)"
_UNIT_WORD = r"(?:lakhs?|lacs?|l|crores?|cr)\b"

RUPEE_REGEX = re.compile(
    rf"{_RUPEE_PREFIX}\s*(?P<value>{_NUMBER})(?!\d|,\d|\.\d|\s*{_UNIT_WORD})",
    re.IGNORECASE,
)
LAKH_REGEX = re.compile(
    rf"(?:{_RUPEE_PREFIX}\s*)?(?P<value>{_NUMBER})\s*(?:lakhs?|lacs?|l)\b",
    re.IGNORECASE,
)
CRORE_REGEX = re.compile(
    rf"(?:{_RUPEE_PREFIX}\s*)?(?P<value>{_NUMBER})\s*(?:crores?|cr)\b",
    re.IGNORECASE,
)
INDIAN_GROUPED_REGEX = re.compile(r"(?<![\d.,])(?P<value>\d{1,3}(?:,\d{2,3})+)(?!\d|,\d|\.\d)")


def _to_decimal(raw: str) -> Decimal | None:
    try:
        value = Decimal(raw.replace(",", ""))
    except InvalidOperation:
        return None
    if not value.is_finite() or value < 0:
        return None
    return value


def _whole_rupees(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _derived_lakhs(rupees: int) -> float:
    return round(rupees / 100_000, 4)


@dataclass(frozen=True)
class RupeeStrategy:
    """Explicit rupee figure: ₹5,00,000 / INR 250000 / Rs. 1,20,000.50."""

    name: str = "rupee"

    def parse(self, text: str) -> FundingAmount | None:
        match = RUPEE_REGEX.search(text)
        if not match:
            return None
        value = _to_decimal(match.group("value"))
        if value is None:
            return None
        rupees = _whole_rupees(value)
        return FundingAmount(raw_text=match.group(0).strip(), inr_minor_units=rupees, lakhs=_derived_lakhs(rupees))


@dataclass(frozen=True)
class LakhStrategy:
    """Lakh suffix: 12 lakh / 7.5 lacs / 40L. Lakhs keep the figure as written."""

    name: str = "lakh"

    def parse(self, text: str) -> FundingAmount | None:
        match = LAKH_REGEX.search(text)
        if not match:
            return None
        value = _to_decimal(match.group("value"))
        if value is None:
            return None
        return FundingAmount(
            raw_text=match.group(0).strip(),
            inr_minor_units=_whole_rupees(value * RUPEES_PER_LAKH),
            lakhs=float(value),
        )


@dataclass(frozen=True)
class CroreStrategy:
    """Crore suffix: 2.5 crore / 100 Cr."""

    name: str = "crore"

    def parse(self, text: str) -> FundingAmount | None:
        match = CRORE_REGEX.search(text)
        if not match:
            return None
        value = _to_decimal(match.group("value"))
        if value is None:
            return None
        rupees = _whole_rupees(value * RUPEES_PER_CRORE)
        return FundingAmount(raw_text=match.group(0).strip(), inr_minor_units=rupees, lakhs=_derived_lakhs(rupees))


@dataclass(frozen=True)
class IndianGroupedStrategy:
    """Bare Indian digit grouping without a unit: 5,00,000."""

    name: str = "indian_grouped"

    def parse(self, text: str) -> FundingAmount | None:
        match = INDIAN_GROUPED_REGEX.search(text)
        if not match:
            return None
        value = _to_decimal(match.group("value"))
        if value is None:
            return None
        rupees = _whole_rupees(value)
        return FundingAmount(raw_text=match.group(0).strip(), inr_minor_units=rupees, lakhs=_derived_lakhs(rupees))


DEFAULT_STRATEGIES = (RupeeStrategy(), LakhStrategy(), CroreStrategy(), IndianGroupedStrategy())


class FundingParser:
    """Walk the notation strategies; the first finite match wins."""

    def __init__(self, strategies: Sequence = DEFAULT_STRATEGIES) -> None:
        self.strategies = tuple(strategies)

    def parse(self, text: str | None) -> FundingAmount | None:
        if not text:
            return None
        if FOREIGN_CURRENCY_REGEX.search(text):
            return None
        for strategy in self.strategies:
            amount = strategy.parse(text)
            if amount is not None:
                logger.debug("Funding parsed strategy=%s raw=%s", strategy.name, amount.raw_text)
                return amount
        return None


def parse_funding(text: str | None) -> FundingAmount | None:
    return FundingParser().parse(text)
