"""
Helper functions for request parsing and error responses.

Authentication lives outside this service: the caller's tenant and actor
arrive in the X-Tenant-Id and X-Actor-Id headers.
"""
from typing import Any, Dict, Tuple

from flask import jsonify, request

from talentflow.errors import InvalidInput, SchedulingError

TENANT_HEADER = "X-Tenant-Id"
ACTOR_HEADER = "X-Actor-Id"


def _required_header(name: str) -> str:
    value = (request.headers.get(name) or "").strip()
    if not value:
        raise InvalidInput(f"{name} header is required", details={"header": name})
    return value


def get_tenant_id() -> str:
    return _required_header(TENANT_HEADER)


def get_actor_id() -> str:
    return _required_header(ACTOR_HEADER)


def get_json_body() -> Dict[str, Any]:
    """The request JSON object. Raises InvalidInput for anything else."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object")
    return data


def error_response(exc: SchedulingError) -> Tuple[Any, int]:
    return jsonify(exc.to_dict()), exc.status_code
