"""Issue tools."""

from __future__ import annotations

from typing import Any

from linear_opencode.tools.base import (
    FIRST,
    FORCE,
    LinearTool,
    ToolResult,
    number,
    schema,
    string,
    string_list,
    tri_state,
)


class CreateIssueTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_create_issue"

    @property
    def description(self) -> str:
        return "Create a new Linear issue. The first team is used when teamId is omitted."

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {
                "title": string("Issue title"),
                "description": string("Issue description in markdown"),
                "teamId": string("Team ID"),
                "assigneeId": string("Assignee user ID"),
                "stateId": string("Workflow state ID"),
                "labelIds": string_list("Label IDs"),
                "priority": number("Priority 0-4 (0 = none, 1 = urgent)"),
                "parentId": string("Parent issue ID"),
                "projectId": string("Project ID"),
            },
            required=["title"],
        )

    async def run(self, **kwargs: Any) -> ToolResult:
        issue = await self._crud.create_issue(
            title=kwargs["title"],
            description=kwargs.get("description"),
            team_id=kwargs.get("teamId"),
            assignee_id=kwargs.get("assigneeId"),
            state_id=kwargs.get("stateId"),
            label_ids=kwargs.get("labelIds"),
            priority=kwargs.get("priority"),
            parent_id=kwargs.get("parentId"),
            project_id=kwargs.get("projectId"),
        )
        if issue is None:
            return ToolResult(success=False, error="Failed to create issue")
        return ToolResult(
            success=True,
            data={
                "id": issue.id,
                "identifier": issue.identifier,
                "title": issue.title,
                "url": issue.url,
            },
        )


class GetIssueTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_get_issue"

    @property
    def description(self) -> str:
        return "Get a Linear issue by ID or identifier (e.g. ENG-123)."

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"issueId": string("Issue ID or identifier")}, required=["issueId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        issue_id: str = kwargs["issueId"]
        issue = await self._crud.get_issue(issue_id)
        if issue is None:
            return ToolResult(success=False, error=f"Issue {issue_id} not found")
        return ToolResult(success=True, data=issue.to_dict())


class UpdateIssueTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_update_issue"

    @property
    def description(self) -> str:
        return (
            "Update a Linear issue you created. Omitted fields are left alone; "
            "null clears assignee, state, parent, project or labels. "
            "Pass force=true to edit someone else's issue."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {
                "issueId": string("Issue ID or identifier"),
                "title": string("New title"),
                "description": string("New description", nullable=True),
                "assigneeId": string("Assignee user ID, or null to unassign", nullable=True),
                "stateId": string("Workflow state ID", nullable=True),
                "labelIds": string_list("Label IDs, [] or null removes all", nullable=True),
                "priority": number("Priority 0-4", nullable=True),
                "parentId": string("Parent issue ID, or null to detach", nullable=True),
                "projectId": string("Project ID, or null to remove from project", nullable=True),
                "force": FORCE,
            },
            required=["issueId"],
        )

    async def run(self, **kwargs: Any) -> ToolResult:
        issue = await self._crud.update_issue(
            kwargs["issueId"],
            title=tri_state(kwargs, "title"),
            description=tri_state(kwargs, "description"),
            assignee_id=tri_state(kwargs, "assigneeId"),
            state_id=tri_state(kwargs, "stateId"),
            label_ids=tri_state(kwargs, "labelIds"),
            priority=tri_state(kwargs, "priority"),
            parent_id=tri_state(kwargs, "parentId"),
            project_id=tri_state(kwargs, "projectId"),
            force=bool(kwargs.get("force", False)),
        )
        if issue is None:
            return ToolResult(success=False, error="Failed to update issue")
        return ToolResult(
            success=True,
            data={
                "id": issue.id,
                "identifier": issue.identifier,
                "title": issue.title,
                "url": issue.url,
            },
        )


class DeleteIssueTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_delete_issue"

    @property
    def description(self) -> str:
        return "Delete a Linear issue you created. Pass force=true to delete someone else's issue."

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"issueId": string("Issue ID"), "force": FORCE}, required=["issueId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        deleted = await self._crud.delete_issue(kwargs["issueId"], force=bool(kwargs.get("force", False)))
        if not deleted:
            return ToolResult(success=False, error="Failed to delete issue")
        return ToolResult(success=True, output="Issue deleted successfully")


class ListIssuesTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_list_issues"

    @property
    def description(self) -> str:
        return "List Linear issues with pagination"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"first": FIRST})

    async def run(self, **kwargs: Any) -> ToolResult:
        issues = await self._crud.list_issues(int(kwargs.get("first") or 50))
        return ToolResult(
            success=True,
            data={"issues": [i.summary() for i in issues], "count": len(issues)},
        )


class ListChildrenTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_list_children"

    @property
    def description(self) -> str:
        return "List the sub-issues of a Linear issue"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"issueId": string("Parent issue ID"), "first": FIRST}, required=["issueId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        children = await self._crud.list_children(kwargs["issueId"], int(kwargs.get("first") or 50))
        return ToolResult(
            success=True,
            data={"children": [c.summary() for c in children], "count": len(children)},
        )
