"""Tools exposed to the OpenCode host."""

from __future__ import annotations

from linear_opencode.core.stream import EventStreamManager
from linear_opencode.linear.context import LinearContext
from linear_opencode.linear.crud import LinearCRUD
from linear_opencode.tools.base import BaseTool, LinearTool, ToolResult
from linear_opencode.tools.comments import (
    AddCommentTool,
    DeleteCommentTool,
    GetCommentTool,
    ListCommentsTool,
    UpdateCommentTool,
)
from linear_opencode.tools.issues import (
    CreateIssueTool,
    DeleteIssueTool,
    GetIssueTool,
    ListChildrenTool,
    ListIssuesTool,
    UpdateIssueTool,
)
from linear_opencode.tools.projects import (
    CreateMilestoneTool,
    CreateProjectTool,
    DeleteMilestoneTool,
    DeleteProjectTool,
    GetProjectTool,
    ListMilestonesTool,
    ListProjectIssuesTool,
    ListProjectsTool,
    UpdateMilestoneTool,
    UpdateProjectTool,
)
from linear_opencode.tools.teams import (
    CreateRelationTool,
    DeleteRelationTool,
    ListLabelsTool,
    ListRelationsTool,
    ListStatesTool,
)
from linear_opencode.tools.webhook import (
    AuthTool,
    StreamHistoryTool,
    WebhookProcessTool,
    WebhookStatusTool,
)
from linear_opencode.webhooks.processor import WebhookEventProcessor

_CRUD_TOOLS: list[type[LinearTool]] = [
    CreateIssueTool,
    GetIssueTool,
    UpdateIssueTool,
    DeleteIssueTool,
    ListIssuesTool,
    ListChildrenTool,
    AddCommentTool,
    GetCommentTool,
    UpdateCommentTool,
    DeleteCommentTool,
    ListCommentsTool,
    ListStatesTool,
    ListLabelsTool,
    CreateRelationTool,
    ListRelationsTool,
    DeleteRelationTool,
    CreateProjectTool,
    GetProjectTool,
    UpdateProjectTool,
    DeleteProjectTool,
    ListProjectsTool,
    ListProjectIssuesTool,
    CreateMilestoneTool,
    UpdateMilestoneTool,
    DeleteMilestoneTool,
    ListMilestonesTool,
]


def build_tools(
    context: LinearContext,
    crud: LinearCRUD,
    processor: WebhookEventProcessor | None = None,
    stream: EventStreamManager | None = None,
) -> dict[str, BaseTool]:
    """Registry of every tool by name.

    Webhook and stream tools are included only when their component is given.
    """
    tools: list[BaseTool] = [AuthTool(context)]
    tools.extend(cls(crud) for cls in _CRUD_TOOLS)
    if processor is not None:
        tools.append(WebhookProcessTool(processor))
        tools.append(WebhookStatusTool(processor))
    if stream is not None:
        tools.append(StreamHistoryTool(stream))
    return {tool.name: tool for tool in tools}


__all__ = ["BaseTool", "LinearTool", "ToolResult", "build_tools"]
