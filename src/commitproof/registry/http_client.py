"""HTTP plumbing for the remote registry.

Provides the ``httpx.AsyncClient`` factory with standardised timeouts,
user-agent and credential headers, plus the response adapters that turn
raw HTTP responses into typed outcomes. All knowledge of status codes and
response bodies lives in this module; nothing else in commitproof looks at
an ``httpx.Response``.

Duplicate detection is structural: HTTP 409, or a 2xx body whose
``status`` field is ``"already_recorded"``. Response text is never scanned
for phrases like "already exists".
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from commitproof import __version__
from commitproof.config import RegistryConfig
from commitproof.core.record.models import AttestationRecord
from commitproof.registry.outcomes import FetchOutcome, SubmitOutcome

logger = logging.getLogger(__name__)

# User-Agent sent with every request.
USER_AGENT: str = f"commitproof/{__version__}"

# Status values a registry may put in a 2xx submission body.
STATUS_ACCEPTED: frozenset[str] = frozenset({"accepted", "ok", "recorded"})
STATUS_DUPLICATE: str = "already_recorded"

# Non-5xx statuses that are worth retrying.
_RETRYABLE_4XX: frozenset[int] = frozenset({408, 425, 429})


def build_client(
    config: RegistryConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the async HTTP client for a registry endpoint.

    Args:
        config: Endpoint, credential and timeout source.
        transport: Optional transport override (``httpx.MockTransport`` in
            tests).

    Returns:
        A configured ``httpx.AsyncClient``. The caller owns closing it.
    """
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if config.api_key:
        headers["Authorization"] = f"Bearer {config.api_key}"
    return httpx.AsyncClient(
        base_url=config.endpoint,
        timeout=config.timeout_seconds,
        headers=headers,
        follow_redirects=True,
        transport=transport,
    )


def _is_transient_status(code: int) -> bool:
    return code >= 500 or code in _RETRYABLE_4XX


def _json_body(response: httpx.Response) -> Any:
    """Parse a JSON body, returning None for empty or non-JSON bodies."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _error_reason(response: httpx.Response) -> str:
    body = _json_body(response)
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            if isinstance(body.get(key), str):
                return f"HTTP {response.status_code}: {body[key]}"
    return f"HTTP {response.status_code}"


def transport_failure(exc: httpx.HTTPError) -> str:
    """Describe a timeout or connection error for logs and the audit trail."""
    if isinstance(exc, httpx.TimeoutException):
        return f"timeout: {type(exc).__name__}"
    return f"connection error: {type(exc).__name__}: {exc}"


# ---------------------------------------------------------------------------
# Response adapters
# ---------------------------------------------------------------------------


def parse_put_response(response: httpx.Response) -> SubmitOutcome:
    """Classify the response to ``POST /records``."""
    code = response.status_code
    if code == 409:
        return SubmitOutcome.already_exists()
    if _is_transient_status(code):
        return SubmitOutcome.transient(_error_reason(response), status_code=code)
    if 400 <= code < 500:
        return SubmitOutcome.rejected(_error_reason(response), status_code=code)
    if not 200 <= code < 300:
        return SubmitOutcome.rejected(f"unexpected HTTP {code}", status_code=code)

    body = _json_body(response)
    if not isinstance(body, dict):
        return SubmitOutcome.accepted()
    status = body.get("status")
    receipt = body.get("receipt") or body.get("receiptId") or ""
    if status is None or str(status).lower() in STATUS_ACCEPTED:
        return SubmitOutcome.accepted(receipt=str(receipt))
    if str(status).lower() == STATUS_DUPLICATE:
        return SubmitOutcome.already_exists()
    return SubmitOutcome.rejected(
        f"registry reported status {status!r}", status_code=code
    )


def parse_get_response(response: httpx.Response) -> FetchOutcome:
    """Classify the response to ``GET /records/{revisionId}``."""
    code = response.status_code
    if code == 404:
        return FetchOutcome.not_found()
    if _is_transient_status(code):
        return FetchOutcome.transient(_error_reason(response), status_code=code)
    if not 200 <= code < 300:
        return FetchOutcome.rejected(_error_reason(response), status_code=code)

    body = _json_body(response)
    if isinstance(body, dict) and isinstance(body.get("record"), dict):
        body = body["record"]
    try:
        record = AttestationRecord.from_payload(body)
    except ValueError as exc:
        logger.warning("Malformed record from registry: %s", exc)
        return FetchOutcome.rejected(f"malformed record: {exc}", status_code=code)
    return FetchOutcome.found(record)


def parse_count_response(response: httpx.Response) -> int:
    """Extract ``count`` from ``GET /records/count``.

    Raises:
        httpx.HTTPStatusError: On a non-2xx response.
        ValueError: If the body carries no integer count.
    """
    response.raise_for_status()
    body = _json_body(response)
    if isinstance(body, dict) and isinstance(body.get("count"), int):
        return body["count"]
    if isinstance(body, int):
        return body
    raise ValueError("registry count response has no integer 'count'")


def parse_ids_response(response: httpx.Response) -> list[str]:
    """Extract ``revisionIds`` from ``GET /records``.

    Raises:
        httpx.HTTPStatusError: On a non-2xx response.
        ValueError: If the body carries no id list.
    """
    response.raise_for_status()
    body = _json_body(response)
    if isinstance(body, dict):
        body = body.get("revisionIds")
    if isinstance(body, list):
        return [str(item) for item in body]
    raise ValueError("registry listing response has no 'revisionIds' list")
