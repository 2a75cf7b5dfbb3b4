# Overview: HTTP transport for the command registry.

# backend/souq_admin/routes/commands.py
"""
Command routes.

GET  /api/commands         catalog: name, description and input_schema per command
POST /api/commands/<name>  JSON body is the argument object; the response is the
                           envelope {content} or {content, error: true}

Command failures are part of the envelope and come back with status 200.
Only transport problems (auth, a body that is not JSON) use HTTP errors.

SECURITY: All routes require the admin bearer token when ADMIN_API_TOKEN is set.
"""
from flask import Blueprint, current_app, jsonify, request

from .. import get_registry
from ..decorators import require_admin_token

commands_bp = Blueprint("commands", __name__, url_prefix="/api/commands")


@commands_bp.get("")
@require_admin_token
def list_commands():
    return jsonify({"commands": get_registry().catalog()})


@commands_bp.post("/<name>")
@require_admin_token
def call_command(name: str):
    if request.content_length and not request.is_json:
        return jsonify({"error": "Request body must be JSON"}), 415

    arguments = request.get_json(silent=True) if request.content_length else {}
    if request.content_length and arguments is None:
        return jsonify({"error": "Invalid JSON body"}), 400

    try:
        envelope = get_registry().dispatch(name, arguments)
    except Exception:
        # dispatch() converts handler errors itself; this only catches wiring failures
        current_app.logger.exception("Command %s could not be dispatched", name)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(envelope), 200
