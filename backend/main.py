"""HTTP entry points for the shop duration estimator.

Provides HTTP endpoints for:
- Estimating job duration (booking form / job creation)
- Reading and updating the estimator configuration (admin config page)
- Health check
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, Any, Optional

import structlog
from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import BadRequest, HTTPException

from config.settings import settings
from config.errors import ConfigWriteError, EstimatorError, ErrorCode, ValidationError
from services.config_store import EstimatorConfigProvider, serialize_config
from services.estimation_service import EstimationService
from validators.estimation_validator import validate_estimation_request

logger = structlog.get_logger()

SERVICE_NAME = "shop-estimator"

ai_bp = Blueprint("ai", __name__, url_prefix="/api/ai")
health_bp = Blueprint("health", __name__, url_prefix="/api")

# ============================================================================
# Helper Functions
# ============================================================================


def error_response(code: str, message: str, details: Dict[str, Any] = None) -> Dict[str, Any]:
    """Build error response."""
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details or {}
        }
    }


def _json_response(data: Dict[str, Any], status: int = 200):
    return jsonify(data), status


def get_request_json() -> Any:
    """Extract JSON from request body.

    Returns:
        Parsed JSON data ({} for an empty body).

    Raises:
        ValidationError: If JSON is invalid.
    """
    if not request.get_data(cache=True):
        return {}
    try:
        return request.get_json(force=True)
    except BadRequest as e:
        raise ValidationError(
            message=f"Invalid JSON in request body: {e.description}",
            code=ErrorCode.INVALID_JSON
        )


def get_estimation_service() -> EstimationService:
    return current_app.extensions["estimation_service"]


def get_config_provider() -> EstimatorConfigProvider:
    return get_estimation_service().config_provider


# ============================================================================
# Estimation Endpoints
# ============================================================================


@ai_bp.route("/estimate-duration", methods=["POST"])
def estimate_duration():
    """Estimate technician hours for a job.

    Request body:
    {
        "serviceType": "repair",
        "vehicleMake": "Yamaha",
        "vehicleModel": "Aerox",
        "vehicleYear": 2010,
        "description": "Engine stalls, brakes squeak"
    }

    Response:
    {
        "estimatedHours": 4.75
    }
    """
    try:
        data = get_request_json()
        validation_result = validate_estimation_request(data)
        if not validation_result.is_valid:
            code = ErrorCode.MISSING_FIELD if validation_result.missing_fields else ErrorCode.VALIDATION_ERROR
            return _json_response(
                error_response(
                    code,
                    validation_result.errors[0],
                    {
                        "missingFields": validation_result.missing_fields,
                        "errors": validation_result.errors
                    }
                ),
                status=400
            )

        hours = asyncio.run(get_estimation_service().estimate_duration(validation_result.parsed))
        return _json_response({"estimatedHours": hours})

    except ValidationError as e:
        return _json_response(error_response(e.code, e.message, e.details), status=400)
    except Exception as e:
        logger.exception("estimate_duration_error", error=str(e))
        return _json_response(
            error_response(
                ErrorCode.INTERNAL_ERROR,
                f"Failed to estimate duration: {str(e)}"
            ),
            status=500
        )


# ============================================================================
# Configuration Endpoints
# ============================================================================


@ai_bp.route("/config", methods=["GET"])
def get_config():
    """Return the effective estimator configuration.

    Keyword patterns are returned as {pattern, flags, deltaHours}; the
    openAI block is redacted to {enabled, model, temperature}.
    """
    try:
        config = get_config_provider().current()
        return _json_response(serialize_config(config))
    except Exception as e:
        logger.exception("get_config_error", error=str(e))
        return _json_response(
            error_response(ErrorCode.INTERNAL_ERROR, f"Failed to read config: {str(e)}"),
            status=500
        )


@ai_bp.route("/config", methods=["PUT"])
def update_config():
    """Replace the runtime override and return the new effective configuration.

    Request body: any subset of the GET /config shape. A non-empty
    keywordAdjustments list replaces the previous list entirely.
    """
    try:
        data = get_request_json()
        config = get_config_provider().save_override(data)
        logger.info("config_updated", fields=sorted(data.keys()) if isinstance(data, dict) else [])
        return _json_response(serialize_config(config))

    except ValidationError as e:
        return _json_response(error_response(e.code, e.message, e.details), status=400)
    except ConfigWriteError as e:
        logger.error("config_write_error", error=e.message, path=e.path)
        return _json_response(error_response(e.code, e.message, e.details), status=500)
    except EstimatorError as e:
        logger.error("config_update_error", error=e.message, code=e.code)
        return _json_response(error_response(e.code, e.message, e.details), status=500)
    except Exception as e:
        logger.exception("config_update_exception", error=str(e))
        return _json_response(
            error_response(ErrorCode.INTERNAL_ERROR, f"Failed to update config: {str(e)}"),
            status=500
        )


# ============================================================================
# Health
# ============================================================================


@health_bp.route("/health", methods=["GET"])
def health():
    return _json_response({
        "status": "OK",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment
    })


# ============================================================================
# App Factory
# ============================================================================


def _handle_http_error(e: HTTPException):
    if e.code == 404:
        code, message = ErrorCode.NOT_FOUND, "Route not found"
    elif e.code == 405:
        code, message = ErrorCode.METHOD_NOT_ALLOWED, "Method not allowed"
    else:
        code, message = ErrorCode.INTERNAL_ERROR, e.description or "Request failed"
    return _json_response(
        error_response(code, message, {"path": request.path, "method": request.method}),
        status=e.code or 500
    )


def create_app(estimation_service: Optional[EstimationService] = None) -> Flask:
    """Build the Flask application.

    Args:
        estimation_service: Service to use (default builds one backed by the
            configured override file).
    """
    app = Flask(__name__)
    CORS(app)

    app.extensions["estimation_service"] = estimation_service or EstimationService()
    app.register_blueprint(ai_bp)
    app.register_blueprint(health_bp)
    app.register_error_handler(HTTPException, _handle_http_error)

    return app
