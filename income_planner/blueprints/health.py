"""Health check blueprint."""

from flask import Blueprint, Response, jsonify

from income_planner.models.historical_returns import FIRST_YEAR, get_returns_pool

health_bp = Blueprint("health", __name__)


@health_bp.route("/healthz")
def health_check() -> Response:
    """Health check endpoint.

    Returns:
        JSON response with status and the bundled returns coverage
    """
    pool = get_returns_pool()
    return jsonify(
        {
            "status": "ok",
            "returns_pool": {
                "first_year": FIRST_YEAR,
                "last_year": FIRST_YEAR + len(pool) - 1,
                "count": len(pool),
            },
        }
    )
