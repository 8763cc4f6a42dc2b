"""Linear webhook HTTP server using aiohttp."""

from __future__ import annotations

import platform
from datetime import datetime, timezone
from typing import Any

from aiohttp import web

from linear_opencode import __version__
from linear_opencode.config import WebhookConfig
from linear_opencode.errors import MalformedPayloadError
from linear_opencode.utils.logging import get_logger
from linear_opencode.webhooks.processor import WebhookEventProcessor, parse_payload
from linear_opencode.webhooks.signature import extract_delivery_id, extract_signature

log = get_logger(__name__)

SERVER_NAME = "Linear OpenCode Webhook Server"


class WebhookServer:
    """Receives Linear webhooks and hands them to the event processor."""

    def __init__(
        self,
        config: WebhookConfig,
        processor: WebhookEventProcessor,
        api_key_configured: bool,
    ) -> None:
        self._config = config
        self._processor = processor
        self._api_key_configured = api_key_configured
        self._runner: web.AppRunner | None = None

    @property
    def path(self) -> str:
        path = self._config.path or "/"
        return path if path.startswith("/") else f"/{path}"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if not self._config.secret:
            log.warning(
                "webhook_no_secret",
                msg="No webhook secret configured, all deliveries will be rejected. Set LINEAR_WEBHOOK_SECRET.",
            )
        app = self._build_app()
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.bind, self._config.port)
        await site.start()
        log.info(
            "webhook_server_started",
            bind=self._config.bind,
            port=self._config.port,
            path=self.path,
        )

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        log.info("webhook_server_stopped")

    # ------------------------------------------------------------------
    # App construction
    # ------------------------------------------------------------------

    def _build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post(self.path, self._handle_webhook)
        if self.path != "/":
            app.router.add_post("/", self._handle_webhook)
        app.router.add_get("/health", self._handle_health)
        app.router.add_get("/info", self._handle_info)
        app.router.add_get("/", self._handle_root)
        return app

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    async def _handle_webhook(self, request: web.Request) -> web.Response:
        body = await request.read()
        if not body:
            return web.json_response({"error": "Missing request body"}, status=400)

        signature = extract_signature(request.headers)
        if not signature:
            log.warning("webhook_missing_signature", remote=request.remote)
            return web.json_response({"error": "Missing signature"}, status=401)

        if not self._processor.verify(body, signature):
            log.warning("webhook_invalid_signature", remote=request.remote)
            return web.json_response({"error": "Invalid signature"}, status=401)

        try:
            payload = parse_payload(body)
        except MalformedPayloadError as e:
            log.warning("webhook_invalid_payload", error=str(e))
            return web.json_response({"error": "Invalid webhook payload"}, status=400)

        delivery_id = extract_delivery_id(request.headers)
        try:
            result = await self._processor.process_event(payload, delivery_id)
        except Exception as e:
            log.exception("webhook_processing_error", type=payload.type, action=payload.action)
            return web.json_response(
                {"error": "Internal server error", "message": str(e)}, status=500
            )

        log.info(
            "webhook_processed",
            type=payload.type,
            action=payload.action,
            processed=result.processed,
            success=result.success,
        )
        return web.json_response(
            {"message": result.message, "data": result.to_dict(), "error": result.error}
        )

    async def _handle_health(self, request: web.Request) -> web.Response:
        checks = {
            "apiKeyConfigured": self._api_key_configured,
            "webhookSecretConfigured": self._processor.configured,
        }
        healthy = all(checks.values())
        body: dict[str, Any] = {
            "success": healthy,
            "status": "healthy" if healthy else "unhealthy",
            "checks": checks,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        return web.json_response(body, status=200 if healthy else 503)

    async def _handle_info(self, request: web.Request) -> web.Response:
        return web.json_response(
            {
                "server": SERVER_NAME,
                "version": __version__,
                "config": {
                    "hasWebhookSecret": self._processor.configured,
                    "path": self.path,
                    "dedupeDeliveries": self._processor.dedupe_deliveries,
                },
                "deployment": {
                    "platform": "aiohttp",
                    "python": platform.python_version(),
                },
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    async def _handle_root(self, request: web.Request) -> web.Response:
        return web.json_response(
            {
                "message": SERVER_NAME,
                "endpoints": {
                    "webhook": f"POST {self.path}",
                    "health": "GET /health",
                    "info": "GET /info",
                },
            }
        )
