"""Turns verified Linear webhooks into executed ``@opencode`` commands.

A delivery moves through these states::

    Received -> Verified -> Classified -> NoReferenceFound
                                       -> ReferencesFound -> CommandsExtracted
                                          -> ResponsePosted

Only comment and issue create/update events are classified; anything else
ends in NoReferenceFound. An issue update whose ``updatedFrom`` does not
list the description ends there too, so unrelated edits never re-run the
commands. Every failure ends the run with ``success=False``
and the context gathered up to that point.
"""

from __future__ import annotations

import json
import re
from collections import deque
from typing import Any

from linear_opencode.core.stream import EventStreamManager
from linear_opencode.errors import MalformedPayloadError
from linear_opencode.executor.base import CommandExecutor, CommandResult
from linear_opencode.linear.crud import LinearCRUD
from linear_opencode.models import StreamEventType
from linear_opencode.references import Command, detect, parse_command
from linear_opencode.utils.logging import get_logger
from linear_opencode.webhooks.models import EventContext, ProcessingResult, WebhookPayload
from linear_opencode.webhooks.signature import verify_signature

log = get_logger(__name__)

DELIVERY_CACHE_SIZE = 1000
REPLY_HEADING = "### OpenCode"

# A zero-width space after "@" keeps echoed markers from being detected again
_MARKER_RE = re.compile(r"@(?=opencode(?!\w))", re.IGNORECASE)

# (type, action) -> (text field in data, stream event type)
_CLASSIFICATION: dict[tuple[str, str], tuple[str, StreamEventType]] = {
    ("Comment", "create"): ("body", StreamEventType.COMMENT_CREATED),
    ("Comment", "update"): ("body", StreamEventType.COMMENT_UPDATED),
    ("Issue", "create"): ("description", StreamEventType.ISSUE_CREATED),
    ("Issue", "update"): ("description", StreamEventType.ISSUE_UPDATED),
}


def parse_payload(raw_body: bytes) -> WebhookPayload:
    try:
        body = json.loads(raw_body)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedPayloadError(f"Webhook body is not valid JSON: {e}") from e
    return WebhookPayload.from_dict(body)


def _issue_target(payload: WebhookPayload) -> tuple[str | None, str | None]:
    data = payload.data
    if payload.type == "Comment":
        issue = data.get("issue") if isinstance(data.get("issue"), dict) else {}
        return data.get("issueId") or issue.get("id"), issue.get("identifier")
    return data.get("id"), data.get("identifier")


def _description_changed(payload: WebhookPayload) -> bool:
    """Issue updates carry the previous values of changed fields in ``updatedFrom``."""
    return "description" in (payload.updated_from or {})


def format_reply(results: list[CommandResult]) -> str:
    """One comment summarising every command result.

    Commands are echoed without the marker and markers inside responses
    are escaped, so the reply never triggers another run.
    """
    lines = [REPLY_HEADING, ""]
    for result in results:
        status = "completed" if result.success else "failed"
        lines.append(f"**`{result.command.display()}`** {status}")
        lines.append("")
        if result.response:
            lines.append(_MARKER_RE.sub("@\u200b", result.response))
            lines.append("")
    return "\n".join(lines).rstrip() + "\n"


class WebhookEventProcessor:
    def __init__(
        self,
        crud: LinearCRUD,
        stream: EventStreamManager,
        executor: CommandExecutor,
        webhook_secret: str | None,
        dedupe_deliveries: bool = False,
    ) -> None:
        self._crud = crud
        self._stream = stream
        self._executor = executor
        self._webhook_secret = webhook_secret
        self._dedupe_deliveries = dedupe_deliveries
        self._seen: deque[str] = deque(maxlen=DELIVERY_CACHE_SIZE)
        self._seen_set: set[str] = set()

    @property
    def configured(self) -> bool:
        return bool(self._webhook_secret)

    @property
    def dedupe_deliveries(self) -> bool:
        return self._dedupe_deliveries

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def verify(self, raw_body: bytes, signature: str | None) -> bool:
        return verify_signature(raw_body, signature, self._webhook_secret)

    async def process_delivery(
        self,
        raw_body: bytes,
        signature: str | None,
        delivery_id: str | None = None,
    ) -> ProcessingResult:
        """Run the whole pipeline from the raw request body."""
        if not self.verify(raw_body, signature):
            log.warning("webhook_signature_rejected", delivery_id=delivery_id)
            return ProcessingResult(
                success=False,
                processed=False,
                message="Webhook signature verification failed",
                error="Invalid signature",
            )
        try:
            payload = parse_payload(raw_body)
        except MalformedPayloadError as e:
            return ProcessingResult(
                success=False,
                processed=False,
                message="Invalid webhook payload",
                error=str(e),
            )
        return await self.process_event(payload, delivery_id)

    async def process_event(
        self, payload: WebhookPayload, delivery_id: str | None = None
    ) -> ProcessingResult:
        """Run the pipeline for a payload whose signature is already verified."""
        if self._is_duplicate(delivery_id):
            log.info("webhook_duplicate_delivery", delivery_id=delivery_id)
            return ProcessingResult(
                success=True,
                processed=False,
                message=f"Duplicate delivery {delivery_id} ignored",
            )

        issue_id, issue_identifier = _issue_target(payload)
        context = EventContext(
            event_type=payload.type,
            action=payload.action,
            actor=payload.actor_name,
            issue_id=issue_id,
            issue_identifier=issue_identifier,
        )
        log.info(
            "webhook_event_received",
            type=payload.type,
            action=payload.action,
            actor=context.actor,
        )

        classification = _CLASSIFICATION.get((payload.type, payload.action))
        if classification is None:
            return ProcessingResult(
                success=True,
                processed=False,
                message=f"Ignored {payload.type} {payload.action} event",
                context=context,
            )

        field, stream_type = classification
        self._stream.stream_event(payload.raw, stream_type)

        if payload.type == "Issue" and payload.action == "update" and not _description_changed(payload):
            return ProcessingResult(
                success=True,
                processed=False,
                message="Issue description unchanged",
                context=context,
            )

        text = payload.data.get(field)
        context.references = detect(text if isinstance(text, str) else None)
        if not context.references:
            return ProcessingResult(
                success=True,
                processed=False,
                message="No @opencode references found",
                context=context,
            )

        try:
            if not issue_id:
                raise MalformedPayloadError(f"{payload.type} event has no issue to reply to")
            commands = [parse_command(ref) for ref in context.references]
            log.info(
                "webhook_commands_extracted",
                count=len(commands),
                actions=[c.action for c in commands],
                issue=issue_identifier or issue_id,
            )
            results = [await self._run_command(payload, command, context) for command in commands]
            await self._crud.add_comment(issue_id, format_reply(results))
        except Exception as e:
            log.exception("webhook_processing_failed", type=payload.type, action=payload.action)
            return ProcessingResult(
                success=False,
                processed=False,
                message="Failed to process webhook event",
                context=context,
                error=str(e),
            )

        succeeded = sum(1 for r in results if r.success)
        return ProcessingResult(
            success=True,
            processed=True,
            message=f"Processed {len(results)} command(s), {succeeded} succeeded",
            context=context,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _run_command(
        self, payload: WebhookPayload, command: Command, context: EventContext
    ) -> CommandResult:
        self._stream.stream_event(
            self._command_event(payload, command), StreamEventType.OPENCODE_COMMAND
        )
        try:
            result = await self._executor.execute(command, context)
        except Exception as e:
            log.exception("command_execution_failed", action=command.action)
            result = CommandResult(command=command, success=False, response=f"Error: {e}")

        self._stream.stream_event(
            self._command_event(payload, command, result), StreamEventType.OPENCODE_RESPONSE
        )
        return result

    @staticmethod
    def _command_event(
        payload: WebhookPayload, command: Command, result: CommandResult | None = None
    ) -> dict[str, Any]:
        info: dict[str, Any] = {"raw": command.raw, "action": command.action}
        if result is not None:
            info["success"] = result.success
            info["response"] = result.response
        return {
            "data": payload.data,
            "actor": payload.actor,
            "url": payload.url,
            "action": payload.action,
            "command": info,
        }

    def _is_duplicate(self, delivery_id: str | None) -> bool:
        if not self._dedupe_deliveries or not delivery_id:
            return False
        if delivery_id in self._seen_set:
            return True
        if len(self._seen) == self._seen.maxlen:
            self._seen_set.discard(self._seen[0])
        self._seen.append(delivery_id)
        self._seen_set.add(delivery_id)
        return False

    def status(self) -> dict[str, Any]:
        return {
            "webhookSecretConfigured": self.configured,
            "dedupeDeliveries": self._dedupe_deliveries,
            "deliveriesTracked": len(self._seen),
            "stream": self._stream.get_stats(),
        }
