import random
from collections import Counter

import pytest

from pharmafind.core import pricing
from pharmafind.models import GeoPoint, PharmacyRecord, StockStatus

RECORD = PharmacyRecord(id=1, name="Apollo Pharmacy", address="", phone="", location=GeoPoint(12.9, 77.5))


class ScriptedRandom:
    """Returns queued values from random() and picks choice() by queued index."""

    def __init__(self, randoms, choices=()):
        self.randoms = list(randoms)
        self.choices = list(choices)

    def random(self):
        return self.randoms.pop(0)

    def choice(self, seq):
        return seq[self.choices.pop(0)] if self.choices else seq[0]


def test_known_medicine_uses_reference_price():
    synth = pricing.AvailabilitySynthesizer(rng=ScriptedRandom([0.5]))

    result = synth.annotate(RECORD, "  PARACETAMOL ")

    assert result.price == 30.0
    assert result.price_unit == "per strip of 15"
    assert result.stock is StockStatus.IN_STOCK


@pytest.mark.parametrize("u,expected", [(0.0, 28.5), (1.0, 31.5), (0.75, 30.75)])
def test_per_pharmacy_variation_is_within_five_percent(u, expected):
    synth = pricing.AvailabilitySynthesizer(rng=ScriptedRandom([u]))

    assert synth.annotate(RECORD, "paracetamol").price == expected


def test_unknown_medicine_price_depends_on_name_length():
    # base = 3 * 5 + 0.5 * 20 = 25, no per-pharmacy variation at u = 0.5
    synth = pricing.AvailabilitySynthesizer(rng=ScriptedRandom([0.5, 0.5]))

    assert synth.annotate(RECORD, "Xyz").price == 25.0


def test_unknown_medicine_price_is_positive():
    rng = random.Random(7)
    synth = pricing.AvailabilitySynthesizer(rng=rng)
    for _ in range(200):
        assert synth.annotate(RECORD, "q").price > 0


def test_stock_is_drawn_from_weighted_states():
    synth = pricing.AvailabilitySynthesizer(rng=ScriptedRandom([0.5] * 5, choices=[0, 3, 4, 1, 2]))

    stocks = [synth.annotate(RECORD, "ibuprofen").stock for _ in range(5)]

    assert stocks == [
        StockStatus.IN_STOCK,
        StockStatus.LOW_STOCK,
        StockStatus.OUT_OF_STOCK,
        StockStatus.IN_STOCK,
        StockStatus.IN_STOCK,
    ]


def test_stock_distribution_favours_in_stock():
    synth = pricing.AvailabilitySynthesizer(rng=random.Random(42))

    counts = Counter(synth.annotate(RECORD, "metformin").stock for _ in range(5000))

    assert set(counts) <= set(StockStatus)
    assert counts[StockStatus.IN_STOCK] / 5000 == pytest.approx(0.6, abs=0.05)
    assert counts[StockStatus.LOW_STOCK] / 5000 == pytest.approx(0.2, abs=0.05)


def test_seeded_sources_repeat():
    first = pricing.AvailabilitySynthesizer(rng=random.Random(3)).annotate(RECORD, "aspirin")
    second = pricing.AvailabilitySynthesizer(rng=random.Random(3)).annotate(RECORD, "aspirin")

    assert first == second


def test_custom_price_unit():
    synth = pricing.AvailabilitySynthesizer(rng=random.Random(1), price_unit="per bottle")

    assert synth.annotate(RECORD, "cetirizine").price_unit == "per bottle"
