"""Entry point: wires the Linear client, processor and webhook server together."""

from __future__ import annotations

import asyncio
import json
import signal
import sys

import click

from linear_opencode import __version__
from linear_opencode.config import Settings, load_settings
from linear_opencode.core.bus import Event, EventBus
from linear_opencode.core.stream import EventStreamManager
from linear_opencode.executor import OpenCodeExecutor
from linear_opencode.linear import LinearContext, LinearCRUD
from linear_opencode.models import StreamEvent
from linear_opencode.tools import BaseTool, build_tools
from linear_opencode.utils.logging import get_logger, setup_logging
from linear_opencode.webhooks.processor import WebhookEventProcessor
from linear_opencode.webhooks.server import WebhookServer

log = get_logger(__name__)


class LinearOpenCode:
    """Main application orchestrator."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

        self.bus = EventBus()
        self.stream = EventStreamManager(
            self.bus,
            max_history=settings.stream.max_history,
            filters=settings.stream.filters,
        )
        self.context = LinearContext(settings.linear)
        self.crud = LinearCRUD(self.context, settings.linear.enable_safety_checks)
        self.executor = OpenCodeExecutor(
            binary=settings.executor.binary,
            timeout=settings.executor.timeout,
            working_dir=settings.executor.working_dir or None,
            max_output_chars=settings.executor.max_output_chars,
        )
        self.processor = WebhookEventProcessor(
            self.crud,
            self.stream,
            self.executor,
            settings.webhook.secret,
            dedupe_deliveries=settings.webhook.dedupe_deliveries,
        )
        self.server = WebhookServer(
            settings.webhook, self.processor, api_key_configured=self.context.configured
        )
        self.tools: dict[str, BaseTool] = build_tools(
            self.context, self.crud, self.processor, self.stream
        )

    async def start(self) -> None:
        log.info("linear_opencode_starting", version=__version__)

        if not self.context.configured:
            log.warning("linear_api_key_missing", msg="Set LINEAR_API_KEY to enable Linear access.")

        if self.settings.stream.enabled:
            self.stream.subscribe(None, self._log_stream_event)
            self.stream.start()

        await self.bus.start()
        await self.server.start()
        log.info("linear_opencode_ready", tools=len(self.tools))

    async def stop(self) -> None:
        log.info("linear_opencode_stopping")
        await self.server.stop()
        self.stream.stop()
        await self.bus.stop()
        await self.context.close()
        log.info("linear_opencode_stopped")

    async def _log_stream_event(self, event: Event) -> None:
        streamed: StreamEvent = event.payload
        log.debug(
            "stream_event",
            type=streamed.type.value,
            title=streamed.title,
            severity=streamed.metadata.severity.value,
        )


async def run(settings: Settings) -> None:
    app = LinearOpenCode(settings)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        log.info("shutdown_signal")
        stop_event.set()

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler)

    await app.start()

    try:
        if sys.platform == "win32":
            while not stop_event.is_set():
                await asyncio.sleep(1)
        else:
            await stop_event.wait()
    except KeyboardInterrupt:
        pass
    finally:
        await app.stop()


def _prepare(config_path: str | None, log_level: str | None) -> Settings:
    settings = load_settings(config_path)
    if log_level:
        settings.log_level = log_level
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    return settings


@click.group()
@click.version_option(__version__, prog_name="linear-opencode")
def cli() -> None:
    """Linear webhooks and tools for OpenCode."""


@cli.command()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--host", default=None, help="Bind address for the webhook server")
@click.option("--port", type=int, default=None, help="Port for the webhook server")
def serve(
    config_path: str | None, log_level: str | None, host: str | None, port: int | None
) -> None:
    """Run the webhook server until interrupted."""
    settings = _prepare(config_path, log_level)
    if host:
        settings.webhook.bind = host
    if port:
        settings.webhook.port = port
    asyncio.run(run(settings))


@cli.command("check-auth")
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
def check_auth(config_path: str | None) -> None:
    """Verify the Linear API key."""
    settings = _prepare(config_path, "WARNING")

    async def _check() -> str:
        context = LinearContext(settings.linear)
        try:
            return await context.test_auth()
        finally:
            await context.close()

    message = asyncio.run(_check())
    click.echo(message)
    if "Successfully authenticated" not in message:
        sys.exit(1)


@cli.command("tools")
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--json", "as_json", is_flag=True, help="Print the full JSON schemas")
def list_tools(config_path: str | None, as_json: bool) -> None:
    """List the tools exposed to OpenCode."""
    app = LinearOpenCode(_prepare(config_path, "WARNING"))
    if as_json:
        click.echo(json.dumps([t.to_schema() for t in app.tools.values()], indent=2))
        return
    for tool in app.tools.values():
        click.echo(f"{tool.name:<28} {tool.description}")


if __name__ == "__main__":
    cli()
