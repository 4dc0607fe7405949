from flask import Blueprint, current_app, jsonify, request

from ..dispatcher import api_response
from ..extensions import EXTENSION_KEY

bp = Blueprint("api", __name__)


def _dispatcher():
    return current_app.extensions[EXTENSION_KEY]


# The operation is chosen by the body's "Method", not the HTTP verb.
@bp.route("/", methods=["GET", "POST", "PUT", "DELETE"])
def handle_request():
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        return jsonify(api_response("error", "Invalid JSON in request body.")), 400
    current_app.logger.debug("Request body: %s", request.get_data(as_text=True))
    status, body = _dispatcher().handle(payload)
    return jsonify(body), status


@bp.get("/health")
def health():
    return jsonify({"status": "ok", "types": _dispatcher().registry.types()})


@bp.app_errorhandler(404)
def not_found(_err):
    return jsonify(api_response("error", "Resource not found.")), 404


@bp.app_errorhandler(413)
def too_large(_err):
    return jsonify(api_response("error", "Request body too large.")), 413
