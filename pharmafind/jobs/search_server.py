"""HTTP entrypoint for pharmacy searches and medicine name lookups."""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from pharmafind.core.config import get_settings
from pharmafind.core.directory import get_directory
from pharmafind.core.pricing import AvailabilitySynthesizer
from pharmafind.core.ranking import RankingEngine, RankingInputError, reorder
from pharmafind.etl.transform import to_result_row
from pharmafind.models import GeoPoint, SortKey
from pharmafind.vendors import gemini

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)


@lru_cache(maxsize=1)
def _get_engine() -> RankingEngine:
    settings = get_settings()
    return RankingEngine(
        directory=get_directory(settings.directory_path),
        synthesizer=AvailabilitySynthesizer(price_unit=settings.price_unit),
        nearest_limit=settings.nearest_limit,
        latency_seconds=settings.search_latency_seconds,
    )


# ---------- Routes ----------


@app.get("/healthz")
def healthcheck() -> Any:
    engine = _get_engine()
    return jsonify({"status": "ok", "pharmacies": len(engine.directory.all_records())}), 200


@app.post("/search")
def search() -> Any:
    """
    Rank nearby pharmacies for one medicine.
    Required JSON fields: lat, lon, medicine
    Optional: sort ("distance", "price" or "availability"; default "distance")
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "request body must be a JSON object"}), 400

    parsed, error = _parse_search_payload(payload)
    if error:
        return jsonify({"error": error}), 400
    location, medicine, sort_key = parsed

    try:
        results = _get_engine().query(location, medicine)
    except RankingInputError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception as exc:  # noqa: BLE001
        logger.exception("Search failed for medicine=%s: %s", medicine, exc)
        return jsonify({"error": "search failed"}), 500

    ordered = reorder(results, sort_key)
    best_id = next((r.id for r in ordered if r.is_best_option), None)
    return (
        jsonify(
            {
                "data": {
                    "medicine": medicine,
                    "count": len(ordered),
                    "best_option_id": best_id,
                    "results": [to_result_row(r) for r in ordered],
                }
            }
        ),
        200,
    )


@app.post("/medicines/validate")
def validate_medicine() -> Any:
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "request body must be a JSON object"}), 400
    name = str(payload.get("name") or "").strip()
    if not name:
        return jsonify({"error": "name is required"}), 400

    result = gemini.validate_medicine_name(name)
    return jsonify({"data": {"valid": result.valid, "corrected_name": result.corrected_name, "reason": result.reason}}), 200


@app.get("/medicines/suggestions")
def medicine_suggestions() -> Any:
    return jsonify({"data": gemini.get_medicine_suggestions(request.args.get("q", ""))}), 200


@app.get("/medicines/recommendations")
def medicine_recommendations() -> Any:
    return jsonify({"data": gemini.get_medicine_recommendations(request.args.get("q", ""))}), 200


@app.get("/medicines/description")
def medicine_description() -> Any:
    description = gemini.get_medicine_description(request.args.get("name", ""))
    if description is None:
        return jsonify({"error": "name is required"}), 400
    return jsonify({"data": description}), 200


# ---------- Internals ----------


def _parse_search_payload(
    payload: Dict[str, Any]
) -> Tuple[Optional[Tuple[GeoPoint, str, SortKey]], Optional[str]]:
    required = ("lat", "lon", "medicine")
    missing = [f for f in required if payload.get(f) in (None, "")]
    if missing:
        return None, f"missing fields: {', '.join(missing)}"

    try:
        location = GeoPoint(latitude=float(payload["lat"]), longitude=float(payload["lon"]))
    except (TypeError, ValueError):
        return None, "lat and lon must be numeric"
    if not (math.isfinite(location.latitude) and math.isfinite(location.longitude)):
        return None, "lat and lon must be finite numbers"

    medicine = str(payload["medicine"]).strip()
    if not medicine:
        return None, "medicine must not be blank"

    try:
        sort_key = SortKey(payload.get("sort") or SortKey.DISTANCE.value)
    except ValueError:
        return None, "sort must be one of: " + ", ".join(k.value for k in SortKey)

    return (location, medicine, sort_key), None


def main() -> None:
    port = get_settings().server_port
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
