"""Request/response mapping for front ends (CLI, HTTP handlers).

``handle_request`` accepts the decoded request body and always returns a
``(status, body)`` pair; it never raises.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Tuple

from .engine import CommitEngine
from .exceptions import IntelliCommitError, InternalFault, ValidationError

GENERIC_FAILURE = "Failed to generate commit message"

logger = logging.getLogger(__name__)


def error_body(exc: IntelliCommitError) -> Dict[str, Any]:
    if isinstance(exc, ValidationError):
        return {"error": str(exc) or "Git diff is required", "code": exc.code}
    return {"error": GENERIC_FAILURE, "code": InternalFault.code}


def handle_request(engine: CommitEngine, payload: Any) -> Tuple[int, Dict[str, Any]]:
    """Map one request payload (``{"diff": ...}``) to a status and body."""
    diff = payload.get("diff") if isinstance(payload, Mapping) else None
    if not isinstance(diff, str) or not diff:
        return 400, error_body(ValidationError("Git diff is required"))
    try:
        result = engine.generate(diff)
    except ValidationError as exc:
        return 400, error_body(exc)
    except IntelliCommitError as exc:
        logger.error("Generation failed: %s", exc)
        return 500, error_body(exc)
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error while handling request")
        return 500, error_body(InternalFault(GENERIC_FAILURE))
    return 200, result.to_dict()
