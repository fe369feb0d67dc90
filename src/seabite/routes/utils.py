import re
from typing import Optional

from flask import current_app, jsonify, request
from marshmallow import ValidationError as SchemaValidationError
from datetime import datetime, timezone

from seabite.core.dependencies import DependencyContainer
from seabite.core.exceptions import UnauthorizedError, ValidationError

PROFILE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def success_response(data, message: Optional[str] = None, status: int = 200):
    """Consistent success response envelope."""
    response = {
        "success": True,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if message:
        response["message"] = message
    return jsonify(response), status


def get_container() -> DependencyContainer:
    """Dependency container of the running app."""
    return current_app.extensions["seabite"]


def get_current_profile_id() -> str:
    """Extract and validate the storage profile from the X-Profile-Id header."""
    profile_id = request.headers.get("X-Profile-Id")
    if not profile_id:
        raise UnauthorizedError("Missing X-Profile-Id header.")
    if not PROFILE_ID_PATTERN.match(profile_id):
        raise ValidationError(
            "Invalid X-Profile-Id header: 1-64 letters, digits, '-' or '_'.",
            field_errors=[{"field": "X-Profile-Id", "message": "invalid format"}],
        )
    return profile_id


def load_or_400(schema, data):
    """Run a marshmallow schema, turning its errors into a ValidationError."""
    try:
        return schema.load(data)
    except SchemaValidationError as err:
        field_errors = [
            {"field": field, "message": "; ".join(str(m) for m in messages) if isinstance(messages, list) else str(messages)}
            for field, messages in err.messages.items()
        ]
        raise ValidationError("Request validation failed", field_errors=field_errors)
