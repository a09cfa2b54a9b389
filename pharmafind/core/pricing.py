"""Simulated price and stock signals for a (pharmacy, medicine) pair.

There is no live inventory feed, so every call draws fresh values from the
supplied random source. Pass a seeded ``random.Random`` to get repeatable
output in tests.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Optional

from pharmafind.models import PharmacyRecord, StockStatus

logger = logging.getLogger(__name__)

# Rupees per strip of 10-15 tablets.
MEDICINE_PRICES: Dict[str, float] = {
    "paracetamol": 30,
    "ibuprofen": 45,
    "metformin": 60,
    "atorvastatin": 80,
    "amoxicillin": 75,
    "cetirizine": 25,
    "dolo 650": 31,
}

DEFAULT_PRICE_UNIT = "per strip of 15"
PRICE_VARIATION = 0.1
UNKNOWN_PRICE_PER_CHAR = 5
UNKNOWN_PRICE_JITTER = 20
STOCK_WEIGHTS = (
    StockStatus.IN_STOCK,
    StockStatus.IN_STOCK,
    StockStatus.IN_STOCK,
    StockStatus.LOW_STOCK,
    StockStatus.OUT_OF_STOCK,
)


@dataclass(frozen=True)
class Availability:
    price: float
    price_unit: str
    stock: StockStatus


def normalize_medicine_name(name: str) -> str:
    return name.strip().lower()


def base_price(medicine_name: str, rng: random.Random) -> float:
    """Reference price for known medicines, a name-length based estimate otherwise."""
    key = normalize_medicine_name(medicine_name)
    known = MEDICINE_PRICES.get(key)
    if known is not None:
        return float(known)
    logger.debug("No reference price for %r; synthesizing one", key)
    return len(key) * UNKNOWN_PRICE_PER_CHAR + rng.random() * UNKNOWN_PRICE_JITTER


class AvailabilitySynthesizer:
    def __init__(self, rng: Optional[random.Random] = None, price_unit: str = DEFAULT_PRICE_UNIT):
        self.rng = rng or random.Random()
        self.price_unit = price_unit

    def annotate(self, record: PharmacyRecord, medicine_name: str) -> Availability:
        base = base_price(medicine_name, self.rng)
        # +/-5% per pharmacy
        price = base * (1 + (self.rng.random() - 0.5) * PRICE_VARIATION)
        stock = self.rng.choice(STOCK_WEIGHTS)
        return Availability(price=round(price, 2), price_unit=self.price_unit, stock=stock)
