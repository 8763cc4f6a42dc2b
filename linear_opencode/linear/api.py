"""Async GraphQL transport for the Linear API."""

from __future__ import annotations

import re
from typing import Any

import httpx

from linear_opencode.errors import LinearAPIError
from linear_opencode.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_API_URL = "https://api.linear.app/graphql"

_OPERATION_RE = re.compile(r"^\s*(?:query|mutation)\s+(\w+)")


def operation_name(document: str) -> str:
    match = _OPERATION_RE.match(document)
    return match.group(1) if match else "anonymous"


class LinearAPI:
    """Thin GraphQL client: one POST per operation, API-key auth.

    Network errors from httpx propagate unchanged; GraphQL ``errors`` and
    failing HTTP statuses raise :class:`LinearAPIError`.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": api_key,
                "Content-Type": "application/json",
            },
        )

    async def execute(
        self, document: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        op = operation_name(document)
        log.debug("linear_request", operation=op)

        response = await self._client.post(
            self._api_url,
            json={"query": document, "variables": variables or {}},
        )

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("errors"):
            errors: list[dict[str, Any]] = body["errors"]
            message = errors[0].get("message", "Unknown GraphQL error")
            log.warning("linear_graphql_error", operation=op, error=message)
            raise LinearAPIError(message, errors=errors, status=response.status_code)

        if response.is_error:
            raise LinearAPIError(
                f"Linear API returned HTTP {response.status_code}",
                status=response.status_code,
            )

        if not isinstance(body, dict):
            raise LinearAPIError("Linear API returned a non-JSON response", status=response.status_code)

        data: dict[str, Any] = body.get("data") or {}
        return data

    async def close(self) -> None:
        await self._client.aclose()


def is_not_found(error: LinearAPIError) -> bool:
    """Linear reports unknown IDs as an ``Entity not found`` GraphQL error."""
    for err in error.errors:
        message = str(err.get("message", "")).lower()
        code = str((err.get("extensions") or {}).get("code", "")).upper()
        if "not found" in message or code == "NOT_FOUND":
            return True
    return False
