"""Explicit Linear client context: credential, API handle, cached identity."""

from __future__ import annotations

import asyncio

import httpx

from linear_opencode.config import LinearConfig
from linear_opencode.errors import AuthenticationError
from linear_opencode.linear import queries
from linear_opencode.linear.api import LinearAPI
from linear_opencode.linear.models import User
from linear_opencode.utils.logging import get_logger

log = get_logger(__name__)


class LinearContext:
    """Owns the authenticated API handle and the current-user identity.

    Both are fetched lazily on first use and reused until :meth:`invalidate`.
    """

    def __init__(
        self,
        config: LinearConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._api: LinearAPI | None = None
        self._authenticated = False
        self._viewer: User | None = None

    @property
    def configured(self) -> bool:
        return bool(self._config.api_key)

    def _ensure_api(self) -> LinearAPI:
        if not self._config.api_key:
            raise AuthenticationError("LINEAR_API_KEY is not configured")
        if self._api is None:
            self._api = LinearAPI(
                self._config.api_key,
                api_url=self._config.api_url,
                timeout=self._config.timeout,
                transport=self._transport,
            )
        return self._api

    async def _fetch_viewer(self, api: LinearAPI) -> User:
        data = await api.execute(queries.VIEWER)
        node = data.get("viewer")
        if not node:
            raise AuthenticationError("Linear did not return the authenticated user")
        return User.from_node(node)

    async def authenticate(self) -> User | None:
        """Check the credential, retrying once after a fixed delay.

        Returns the viewer, or None when both attempts fail.
        """
        api = self._ensure_api()
        try:
            viewer = await self._fetch_viewer(api)
        except Exception as e:
            log.warning("linear_auth_failed", error=str(e), retry_in=self._config.auth_retry_delay)
            await asyncio.sleep(self._config.auth_retry_delay)
            try:
                viewer = await self._fetch_viewer(api)
            except Exception as retry_error:
                log.error("linear_auth_retry_failed", error=str(retry_error))
                return None

        self._viewer = viewer
        self._authenticated = True
        return viewer

    async def client(self) -> LinearAPI:
        """Authenticated API handle, verified once per context lifetime."""
        api = self._ensure_api()
        if not self._authenticated:
            if await self.authenticate() is None:
                raise AuthenticationError("Linear client not available")
        return api

    async def viewer(self) -> User:
        if self._viewer is None:
            api = await self.client()
            if self._viewer is None:
                self._viewer = await self._fetch_viewer(api)
        return self._viewer

    async def test_auth(self) -> str:
        if not self.configured:
            return "Linear: LINEAR_API_KEY is not configured"
        try:
            user = await self.authenticate()
        except Exception as e:
            return f"Linear: Authentication error - {e}"
        if user is None:
            return "Linear: Authentication failed - check API key and connection"
        return f"Linear: Successfully authenticated as {user.label}"

    def invalidate(self) -> None:
        """Forget the verified state and cached identity."""
        self._authenticated = False
        self._viewer = None

    async def close(self) -> None:
        if self._api is not None:
            await self._api.close()
            self._api = None
        self.invalidate()
