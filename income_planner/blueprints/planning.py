"""
Planning blueprint for household projections and simulations.

This module provides API endpoints that accept a household snapshot and
return projections, Monte Carlo success rates, and survivor analyses.
"""

from typing import Any

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from income_planner.config import check_simulation_count
from income_planner.services.planning_service import PlanningService

planning_bp = Blueprint("planning", __name__, url_prefix="/api")


def _validation_error(e: Exception) -> Any:
    if isinstance(e, ValidationError):
        details: Any = e.errors(
            include_url=False, include_context=False, include_input=False
        )
    else:
        details = str(e)
    return jsonify({"error": "Invalid request", "details": details}), 400


def _simulation_options(data: dict) -> dict:
    """Extract and check optional simulation parameters."""
    num_simulations = data.get("num_simulations")
    if num_simulations is not None:
        check_simulation_count(num_simulations)

    returns = data.get("historical_returns_pct")
    if returns is not None and not isinstance(returns, list):
        raise ValueError("historical_returns_pct must be a list of numbers")

    return {
        "path": data.get("path", "current"),
        "historical_returns_pct": returns,
        "num_simulations": num_simulations,
    }


@planning_bp.route("/projection", methods=["POST"])
def create_projection() -> Any:
    """Project the current and conversion paths for a snapshot.

    Returns:
        JSON response with both projections and their summaries
    """
    try:
        data = request.get_json(silent=True) or {}
        results = PlanningService().run_projection(data.get("snapshot", {}))
        return jsonify(results), 200

    except (ValidationError, ValueError) as e:
        return _validation_error(e)
    except Exception as e:
        current_app.logger.error(f"Error running projection: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@planning_bp.route("/monte-carlo", methods=["POST"])
def create_monte_carlo() -> Any:
    """Estimate the probability of funding the income goal for one path.

    Returns:
        JSON response with success statistics (null when not applicable)
    """
    try:
        data = request.get_json(silent=True) or {}
        options = _simulation_options(data)
        result = PlanningService().run_monte_carlo(data.get("snapshot", {}), **options)
        return jsonify({"path": options["path"], "result": result}), 200

    except (ValidationError, ValueError) as e:
        return _validation_error(e)
    except Exception as e:
        current_app.logger.error(f"Error running Monte Carlo: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@planning_bp.route("/survivor", methods=["POST"])
def create_survivor_analysis() -> Any:
    """Survivor shortfall and survivor Monte Carlo after the client's death.

    Returns:
        JSON response with the shortfall summary and simulation statistics
    """
    try:
        data = request.get_json(silent=True) or {}
        death_age = data.get("death_age")
        if (
            isinstance(death_age, bool)
            or not isinstance(death_age, int)
            or death_age < 0
        ):
            raise ValueError("death_age must be a non-negative integer")

        options = _simulation_options(data)
        results = PlanningService().run_survivor_analysis(
            data.get("snapshot", {}), death_age, **options
        )
        return jsonify({"path": options["path"], "death_age": death_age, **results}), 200

    except (ValidationError, ValueError) as e:
        return _validation_error(e)
    except Exception as e:
        current_app.logger.error(f"Error running survivor analysis: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500
