"""Workflow state, label and issue relation tools."""

from __future__ import annotations

from typing import Any

from linear_opencode.linear.crud import RELATION_DIRECTIONS, RELATION_TYPES
from linear_opencode.linear.models import plain
from linear_opencode.tools.base import FIRST, FORCE, LinearTool, ToolResult, schema, string

TEAM_ID = string("Team ID (the first team is used when omitted)")


class ListStatesTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_list_states"

    @property
    def description(self) -> str:
        return "List workflow states (statuses) for a team"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"teamId": TEAM_ID})

    async def run(self, **kwargs: Any) -> ToolResult:
        states = await self._crud.list_states(kwargs.get("teamId"))
        return ToolResult(
            success=True,
            data={"states": [plain(s) for s in states], "count": len(states)},
        )


class ListLabelsTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_list_labels"

    @property
    def description(self) -> str:
        return "List issue labels for a team"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"teamId": TEAM_ID})

    async def run(self, **kwargs: Any) -> ToolResult:
        labels = await self._crud.list_labels(kwargs.get("teamId"))
        return ToolResult(
            success=True,
            data={"labels": [plain(label) for label in labels], "count": len(labels)},
        )


# ---------------------------------------------------------------------------
# Relations
# ---------------------------------------------------------------------------

class CreateRelationTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_create_relation"

    @property
    def description(self) -> str:
        return "Create a relation between two issues. You must have created the source issue."

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {
                "issueId": string("Source issue ID"),
                "relatedIssueId": string("Related issue ID"),
                "type": {
                    "type": "string",
                    "enum": list(RELATION_TYPES),
                    "description": "Relation type",
                },
                "force": FORCE,
            },
            required=["issueId", "relatedIssueId", "type"],
        )

    async def run(self, **kwargs: Any) -> ToolResult:
        relation = await self._crud.create_relation(
            kwargs["issueId"],
            kwargs["relatedIssueId"],
            kwargs["type"],
            force=bool(kwargs.get("force", False)),
        )
        if relation is None:
            return ToolResult(success=False, error="Failed to create relation")
        return ToolResult(
            success=True,
            data={"id": relation.id, "type": relation.type, "createdAt": relation.created_at},
        )


class ListRelationsTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_list_relations"

    @property
    def description(self) -> str:
        return "List issue relations for an issue"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {
                "issueId": string("Issue ID"),
                "direction": {
                    "type": "string",
                    "enum": list(RELATION_DIRECTIONS),
                    "description": "'from' this issue, 'to' this issue, or 'both' (default)",
                },
                "first": FIRST,
            },
            required=["issueId"],
        )

    async def run(self, **kwargs: Any) -> ToolResult:
        relations = await self._crud.list_relations(
            kwargs["issueId"],
            kwargs.get("direction") or "both",
            int(kwargs.get("first") or 50),
        )
        return ToolResult(
            success=True,
            data={"relations": [r.to_dict() for r in relations], "count": len(relations)},
        )


class DeleteRelationTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_delete_relation"

    @property
    def description(self) -> str:
        return "Delete an issue relation. You must have created the source issue."

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"relationId": string("Relation ID"), "force": FORCE}, required=["relationId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        deleted = await self._crud.delete_relation(
            kwargs["relationId"], force=bool(kwargs.get("force", False))
        )
        if not deleted:
            return ToolResult(success=False, error="Failed to delete relation")
        return ToolResult(success=True, output="Relation deleted successfully")
