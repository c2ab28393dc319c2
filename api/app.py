"""
Flask web server for the scenario evaluation API.
"""

from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from scenario_model import (
    CrisisProfileCatalog,
    GoalDefinition,
    MonteCarloConfig,
    ResourceExhaustionError,
    RiskProfiler,
    Scenario,
    ScenarioGenerator,
    StressTestEngine,
    UnknownCrisisError,
    ValidationError,
    __version__,
    comparison_table,
    evaluate_many,
    goals_from_client,
    simulation_horizon,
    stress_test_all,
)

# Process environment takes precedence over the optional .env file
env_path = Path(__file__).parent / ".env"
if env_path.exists():
    load_dotenv(env_path, override=False)

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8002"))
SIMULATION_COUNT = int(os.getenv("SIMULATION_COUNT", "5000"))
SIMULATION_SEED = os.getenv("SIMULATION_SEED")
SIMULATION_WORKERS = int(os.getenv("SIMULATION_WORKERS", "1"))
MAX_SIMULATIONS = int(os.getenv("MAX_SIMULATIONS", "100000"))

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)

CATALOG = CrisisProfileCatalog.create_default()


def _to_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number, got {value!r}") from e


def _to_int(value: Any, name: str) -> int:
    return int(_to_float(value, name))


def _json_body() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValidationError("Request JSON body is required")
    if not isinstance(payload, dict):
        raise ValidationError("Request JSON body must be an object")
    return payload


def _monte_carlo_config(payload: Dict[str, Any]) -> MonteCarloConfig:
    count = payload.get("simulation_count", SIMULATION_COUNT)
    seed = payload.get("seed", SIMULATION_SEED)
    return MonteCarloConfig(
        num_simulations=_to_int(count, "simulation_count"),
        random_seed=_to_int(seed, "seed") if seed not in (None, "") else None,
        max_workers=SIMULATION_WORKERS,
        max_simulations=MAX_SIMULATIONS,
    )


def _scenarios(payload: Dict[str, Any]) -> List[Scenario]:
    raw = payload.get("scenarios")
    if not isinstance(raw, list) or not raw:
        raise ValidationError("'scenarios' must be a non-empty list")
    return [Scenario.from_dict(item) for item in raw]


def _goals(payload: Dict[str, Any]) -> List[GoalDefinition]:
    reference_year = _to_int(payload.get("reference_year", date.today().year), "reference_year")
    if "goals" in payload:
        raw = payload["goals"] or []
        if not isinstance(raw, list):
            raise ValidationError("'goals' must be a list")
        return [GoalDefinition.from_dict(item, reference_year=reference_year) for item in raw]
    client = payload.get("client")
    if isinstance(client, dict):
        return goals_from_client(client, reference_year=reference_year)
    return []


def _horizon(payload: Dict[str, Any]) -> int:
    if payload.get("horizon_years") is not None:
        years = _to_float(payload["horizon_years"], "horizon_years")
        if not years.is_integer():
            raise ValidationError(f"horizon_years must be a whole number, got {payload['horizon_years']!r}")
        return int(years)
    age = payload.get("age")
    if age is None and isinstance(payload.get("client"), dict):
        age = payload["client"].get("age")
    return simulation_horizon(_to_int(age, "age") if age is not None else None)


def _records(df) -> List[Dict[str, Any]]:
    if df.empty:
        return []
    return df.reset_index().to_dict(orient="records")


@app.errorhandler(ValidationError)
@app.errorhandler(UnknownCrisisError)
def handle_bad_request(error: Exception) -> Tuple[Any, int]:
    return jsonify({"success": False, "error": str(error)}), 400


@app.errorhandler(ResourceExhaustionError)
def handle_too_large(error: Exception) -> Tuple[Any, int]:
    logger.warning("Rejected oversized request: %s", error)
    return jsonify({"success": False, "error": str(error)}), 413


@app.get("/health")
def health() -> Tuple[Any, int]:
    return jsonify({"ok": True, "service": "scenario-model-api", "version": __version__}), 200


@app.get("/scenario/api/v1/crises")
def crises() -> Tuple[Any, int]:
    return jsonify({
        "success": True,
        "version": CATALOG.version,
        "crises": [crisis.to_dict() for crisis in CATALOG],
    }), 200


@app.post("/scenario/api/v1/risk-profile")
def risk_profile() -> Tuple[Any, int]:
    payload = _json_body()
    answers = payload.get("answers")
    if not isinstance(answers, dict):
        raise ValidationError("'answers' must map question ids to option numbers")
    profile = RiskProfiler().assess(answers)
    return jsonify({"success": True, "risk_profile": profile.to_dict()}), 200


@app.post("/scenario/api/v1/scenarios/generate")
def generate_scenarios() -> Tuple[Any, int]:
    payload = _json_body()
    if payload.get("risk_percentage") is None:
        raise ValidationError("'risk_percentage' is required")
    risk_percentage = _to_float(payload["risk_percentage"], "risk_percentage")
    age = payload.get("age")
    income = payload.get("monthly_income")
    top = _to_int(payload.get("top", 3), "top")

    generator = ScenarioGenerator()
    generated = generator.generate(
        risk_percentage,
        age=_to_int(age, "age") if age is not None else None,
        monthly_income=_to_float(income, "monthly_income") if income is not None else None,
    )
    return jsonify({
        "success": True,
        "scenarios": [g.to_dict() for g in generated],
        "recommended": [g.id for g in generator.top_scenarios(generated, top)],
    }), 200


@app.post("/scenario/api/v1/simulate")
def simulate() -> Tuple[Any, int]:
    payload = _json_body()
    scenarios = _scenarios(payload)
    goals = _goals(payload)
    horizon = _horizon(payload)
    config = _monte_carlo_config(payload)

    results = evaluate_many(scenarios, goals, horizon, config=config)
    return jsonify({
        "success": True,
        "horizon_years": horizon,
        "results": {sid: result.to_dict() for sid, result in results.items()},
        "comparison": _records(comparison_table(results)),
    }), 200


def _current_values(payload: Dict[str, Any]) -> Optional[Dict[str, float]]:
    raw = payload.get("current_values")
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValidationError("'current_values' must map scenario ids to portfolio values")
    return {str(k): _to_float(v, f"current_values[{k}]") for k, v in raw.items()}


@app.post("/scenario/api/v1/stress-test")
def stress_test() -> Tuple[Any, int]:
    payload = _json_body()
    scenarios = _scenarios(payload)
    goals = _goals(payload)
    crisis_ids = payload.get("crisis_ids")
    if payload.get("crisis_id"):
        crisis_ids = [payload["crisis_id"]]
    if crisis_ids is not None and not isinstance(crisis_ids, list):
        raise ValidationError("'crisis_ids' must be a list")
    if crisis_ids and not all(isinstance(cid, str) for cid in crisis_ids):
        raise ValidationError("'crisis_ids' must contain crisis id strings")

    current_values = _current_values(payload)
    if current_values is not None:
        engine = StressTestEngine()
        crises = [CATALOG.get(cid) for cid in crisis_ids] if crisis_ids else CATALOG.list()
        stressed = {}
        for scenario in scenarios:
            if scenario.id not in current_values:
                raise ValidationError(f"No current value for scenario '{scenario.id}'")
            stressed[scenario.id] = [
                engine.apply(scenario, current_values[scenario.id], crisis, goals) for crisis in crises
            ]
    else:
        results = evaluate_many(scenarios, goals, _horizon(payload), config=_monte_carlo_config(payload))
        stressed = stress_test_all(scenarios, results, CATALOG, goals, crisis_ids=crisis_ids)

    return jsonify({
        "success": True,
        "catalog_version": CATALOG.version,
        "results": {sid: [r.to_dict() for r in runs] for sid, runs in stressed.items()},
    }), 200


if __name__ == "__main__":
    app.run(host=HOST, port=PORT, debug=False)
