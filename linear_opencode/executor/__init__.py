"""Executors that run commands extracted from Linear text."""

from linear_opencode.executor.base import CommandExecutor, CommandResult
from linear_opencode.executor.opencode import OpenCodeExecutor

__all__ = ["CommandExecutor", "CommandResult", "OpenCodeExecutor"]
