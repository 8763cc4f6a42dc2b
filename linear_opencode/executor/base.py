"""Command executor interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from linear_opencode.references import Command
from linear_opencode.webhooks.models import EventContext


@dataclass
class CommandResult:
    command: Command
    success: bool
    response: str = ""


class CommandExecutor(ABC):
    @abstractmethod
    async def execute(self, command: Command, context: EventContext) -> CommandResult: ...
