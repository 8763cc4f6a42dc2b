"""Delegate commands to the OpenCode CLI."""

from __future__ import annotations

import asyncio

from linear_opencode.executor.base import CommandExecutor, CommandResult
from linear_opencode.references import Command
from linear_opencode.utils.logging import get_logger
from linear_opencode.webhooks.models import EventContext

log = get_logger(__name__)

HELP_TEXT = """Usage: `@opencode <action> [arguments] [--options]`

Anything after the action is passed to OpenCode as the task, together with
the issue it was written on. Several commands can be chained in one comment;
each `@opencode` starts a new one.

Examples:
- `@opencode review --focus security`
- `@opencode fix the failing login test`
- `@opencode help`"""


class OpenCodeExecutor(CommandExecutor):
    """Runs ``opencode run <prompt>`` as a subprocess, one per command."""

    def __init__(
        self,
        binary: str = "opencode",
        timeout: int = 300,
        working_dir: str | None = None,
        max_output_chars: int = 8000,
    ) -> None:
        self._binary = binary
        self._timeout = timeout
        self._working_dir = working_dir or None
        self._max_output_chars = max_output_chars

    def build_prompt(self, command: Command, context: EventContext) -> str:
        task = " ".join([command.action, *command.args])
        lines = [f"Linear {context.event_type.lower()} {context.action} by {context.actor}"]
        if context.issue_identifier:
            lines.append(f"Issue: {context.issue_identifier}")
        lines.append(f"Task: {task}")
        if command.options:
            opts = ", ".join(
                name if value is True else f"{name}={value}"
                for name, value in command.options.items()
            )
            lines.append(f"Options: {opts}")
        if command.reference is not None:
            lines.append("")
            lines.append("Full text:")
            lines.append(command.reference.context)
        return "\n".join(lines)

    async def execute(self, command: Command, context: EventContext) -> CommandResult:
        if command.action == "help":
            return CommandResult(command=command, success=True, response=HELP_TEXT)

        prompt = self.build_prompt(command, context)
        log.info("opencode_delegating", action=command.action, timeout=self._timeout)

        try:
            proc = await asyncio.create_subprocess_exec(
                self._binary,
                "run",
                prompt,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self._working_dir,
            )

            try:
                stdout, stderr = await asyncio.wait_for(
                    proc.communicate(), timeout=self._timeout
                )
            except asyncio.TimeoutError:
                proc.kill()
                await proc.wait()
                return CommandResult(
                    command=command,
                    success=False,
                    response=f"OpenCode timed out after {self._timeout}s",
                )

            output = stdout.decode("utf-8", errors="replace").strip()
            stderr_str = stderr.decode("utf-8", errors="replace").strip()

            # Truncate very long output
            if len(output) > self._max_output_chars:
                output = (
                    output[: self._max_output_chars]
                    + f"\n... (truncated, {len(output)} total chars)"
                )

            success = proc.returncode == 0
            if stderr_str and not success:
                output = f"{output}\n\nSTDERR:\n{stderr_str}" if output else stderr_str

            log.info("opencode_finished", action=command.action, exit_code=proc.returncode)
            return CommandResult(command=command, success=success, response=output)

        except FileNotFoundError:
            return CommandResult(
                command=command,
                success=False,
                response=f"OpenCode CLI ('{self._binary}') not found. Is it installed and on PATH?",
            )
        except Exception as e:
            log.exception("opencode_error", action=command.action)
            return CommandResult(command=command, success=False, response=str(e))
