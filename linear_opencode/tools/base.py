"""Base tool interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from linear_opencode.errors import LinearOpenCodeError
from linear_opencode.linear.crud import UNSET, LinearCRUD
from linear_opencode.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class ToolResult:
    success: bool
    output: str = ""
    error: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """JSON shape returned to the host: ``{success, ...}``."""
        if not self.success:
            return {"success": False, **self.data, "error": self.error or self.output or "Unknown error"}
        result: dict[str, Any] = {"success": True, **self.data}
        if self.output:
            result.setdefault("message", self.output)
        return result


class BaseTool(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for tool parameters."""
        ...

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult: ...

    def to_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


class LinearTool(BaseTool):
    """Tool backed by the CRUD client. No exception escapes ``execute``."""

    def __init__(self, crud: LinearCRUD) -> None:
        self._crud = crud

    async def execute(self, **kwargs: Any) -> ToolResult:
        try:
            return await self.run(**kwargs)
        except LinearOpenCodeError as e:
            log.warning("tool_failed", tool=self.name, error=str(e))
            return ToolResult(success=False, error=str(e))
        except Exception as e:
            log.exception("tool_error", tool=self.name)
            return ToolResult(success=False, error=str(e) or type(e).__name__)

    @abstractmethod
    async def run(self, **kwargs: Any) -> ToolResult: ...


# ---------------------------------------------------------------------------
# Schema helpers
# ---------------------------------------------------------------------------

def schema(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    result: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        result["required"] = required
    return result


def string(description: str, nullable: bool = False) -> dict[str, Any]:
    return {"type": ["string", "null"] if nullable else "string", "description": description}


def number(description: str, nullable: bool = False) -> dict[str, Any]:
    return {"type": ["number", "null"] if nullable else "number", "description": description}


def boolean(description: str) -> dict[str, Any]:
    return {"type": "boolean", "description": description}


def string_list(description: str, nullable: bool = False) -> dict[str, Any]:
    return {
        "type": ["array", "null"] if nullable else "array",
        "items": {"type": "string"},
        "description": description,
    }


FORCE = boolean("Skip the ownership check (default: false)")
FIRST = number("Maximum number of results to return (default: 50)")


def tri_state(kwargs: dict[str, Any], key: str) -> Any:
    """Absent keys stay UNSET, an explicit null clears."""
    return kwargs[key] if key in kwargs else UNSET
