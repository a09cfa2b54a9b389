"""CLI job that ranks nearby pharmacies for one medicine and prints JSON."""

import argparse
import json
import logging
import math
import random
import sys
from typing import List, Optional

from pharmafind.core.config import ConfigError, get_settings
from pharmafind.core.directory import DirectoryError, get_directory
from pharmafind.core.pricing import AvailabilitySynthesizer
from pharmafind.core.ranking import RankingEngine, RankingInputError, reorder
from pharmafind.etl.transform import to_result_row
from pharmafind.models import GeoPoint, SortKey

logger = logging.getLogger(__name__)


def run_search(
    *,
    lat: float,
    lon: float,
    medicine: str,
    sort: str,
    limit: Optional[int] = None,
    seed: Optional[int] = None,
) -> List[dict]:
    settings = get_settings()
    engine = RankingEngine(
        directory=get_directory(settings.directory_path),
        synthesizer=AvailabilitySynthesizer(
            rng=random.Random(seed),
            price_unit=settings.price_unit,
        ),
        nearest_limit=settings.nearest_limit if limit is None else limit,
        latency_seconds=settings.search_latency_seconds,
    )
    results = engine.query(GeoPoint(latitude=lat, longitude=lon), medicine)
    return [to_result_row(r) for r in reorder(results, sort)]


def finite_float(value: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise argparse.ArgumentTypeError(f"{value!r} is not a finite number")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find nearby pharmacies stocking a medicine")
    parser.add_argument("medicine", help="Medicine name, e.g. 'Paracetamol'")
    parser.add_argument("--lat", dest="lat", type=finite_float, required=True, help="Latitude in decimal degrees")
    parser.add_argument("--lon", dest="lon", type=finite_float, required=True, help="Longitude in decimal degrees")
    parser.add_argument(
        "--sort",
        dest="sort",
        choices=[k.value for k in SortKey],
        default=SortKey.DISTANCE.value,
        help="Order of the results after the best option",
    )
    parser.add_argument("--limit", dest="limit", type=int, help="Number of nearest pharmacies to consider")
    parser.add_argument("--seed", dest="seed", type=int, help="Seed for repeatable simulated prices and stock")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        rows = run_search(
            lat=args.lat,
            lon=args.lon,
            medicine=args.medicine,
            sort=args.sort,
            limit=args.limit,
            seed=args.seed,
        )
    except (ConfigError, DirectoryError, RankingInputError) as exc:
        logger.error("Search failed: %s", exc)
        raise SystemExit(2) from exc

    json.dump(rows, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
