"""Project and project milestone tools."""

from __future__ import annotations

from typing import Any

from linear_opencode.tools.base import (
    FIRST,
    FORCE,
    LinearTool,
    ToolResult,
    boolean,
    number,
    schema,
    string,
    string_list,
    tri_state,
)


class CreateProjectTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_create_project"

    @property
    def description(self) -> str:
        return "Create a Linear project. The first team is used when teamIds is omitted."

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {
                "name": string("Project name"),
                "teamIds": string_list("Team IDs"),
                "description": string("Short description"),
                "content": string("Project document in markdown"),
                "color": string("Hex color"),
                "icon": string("Icon name"),
                "leadId": string("Lead user ID"),
                "memberIds": string_list("Member user IDs"),
                "labelIds": string_list("Project label IDs"),
                "priority": number("Priority 0-4"),
                "startDate": string("Start date (YYYY-MM-DD)"),
                "targetDate": string("Target date (YYYY-MM-DD)"),
                "statusId": string("Project status ID"),
            },
            required=["name"],
        )

    async def run(self, **kwargs: Any) -> ToolResult:
        project = await self._crud.create_project(
            name=kwargs["name"],
            team_ids=kwargs.get("teamIds"),
            description=kwargs.get("description"),
            content=kwargs.get("content"),
            color=kwargs.get("color"),
            icon=kwargs.get("icon"),
            lead_id=kwargs.get("leadId"),
            member_ids=kwargs.get("memberIds"),
            label_ids=kwargs.get("labelIds"),
            priority=kwargs.get("priority"),
            start_date=kwargs.get("startDate"),
            target_date=kwargs.get("targetDate"),
            status_id=kwargs.get("statusId"),
        )
        if project is None:
            return ToolResult(success=False, error="Failed to create project")
        return ToolResult(
            success=True,
            data={"id": project.id, "name": project.name, "url": project.url},
        )


class GetProjectTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_get_project"

    @property
    def description(self) -> str:
        return "Get a Linear project by ID"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"projectId": string("Project ID")}, required=["projectId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        project_id: str = kwargs["projectId"]
        project = await self._crud.get_project(project_id)
        if project is None:
            return ToolResult(success=False, error=f"Project {project_id} not found")
        return ToolResult(success=True, data=project.to_dict())


class UpdateProjectTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_update_project"

    @property
    def description(self) -> str:
        return (
            "Update a project you lead. Omitted fields are left alone; null clears. "
            "Pass force=true to edit a project led by someone else."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {
                "projectId": string("Project ID"),
                "name": string("New name"),
                "description": string("Short description", nullable=True),
                "content": string("Project document", nullable=True),
                "color": string("Hex color", nullable=True),
                "icon": string("Icon name", nullable=True),
                "leadId": string("Lead user ID, or null to clear", nullable=True),
                "memberIds": string_list("Member user IDs", nullable=True),
                "labelIds": string_list("Project label IDs", nullable=True),
                "priority": number("Priority 0-4", nullable=True),
                "startDate": string("Start date", nullable=True),
                "targetDate": string("Target date", nullable=True),
                "statusId": string("Project status ID", nullable=True),
                "teamIds": string_list("Team IDs"),
                "force": FORCE,
            },
            required=["projectId"],
        )

    async def run(self, **kwargs: Any) -> ToolResult:
        project = await self._crud.update_project(
            kwargs["projectId"],
            name=tri_state(kwargs, "name"),
            description=tri_state(kwargs, "description"),
            content=tri_state(kwargs, "content"),
            color=tri_state(kwargs, "color"),
            icon=tri_state(kwargs, "icon"),
            lead_id=tri_state(kwargs, "leadId"),
            member_ids=tri_state(kwargs, "memberIds"),
            label_ids=tri_state(kwargs, "labelIds"),
            priority=tri_state(kwargs, "priority"),
            start_date=tri_state(kwargs, "startDate"),
            target_date=tri_state(kwargs, "targetDate"),
            status_id=tri_state(kwargs, "statusId"),
            team_ids=tri_state(kwargs, "teamIds"),
            force=bool(kwargs.get("force", False)),
        )
        if project is None:
            return ToolResult(success=False, error="Failed to update project")
        return ToolResult(success=True, data=project.to_dict())


class DeleteProjectTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_delete_project"

    @property
    def description(self) -> str:
        return "Delete a project you lead. Pass force=true to delete a project led by someone else."

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"projectId": string("Project ID"), "force": FORCE}, required=["projectId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        deleted = await self._crud.delete_project(
            kwargs["projectId"], force=bool(kwargs.get("force", False))
        )
        if not deleted:
            return ToolResult(success=False, error="Failed to delete project")
        return ToolResult(success=True, output="Project deleted successfully")


class ListProjectsTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_list_projects"

    @property
    def description(self) -> str:
        return "List Linear projects, optionally only the ones you lead"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"mine": boolean("Only projects you lead"), "first": FIRST})

    async def run(self, **kwargs: Any) -> ToolResult:
        limit = int(kwargs.get("first") or 50)
        if kwargs.get("mine"):
            projects = await self._crud.list_my_projects(limit)
        else:
            projects = await self._crud.list_projects(limit=limit)
        return ToolResult(
            success=True,
            data={"projects": [p.to_dict() for p in projects], "count": len(projects)},
        )


class ListProjectIssuesTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_list_project_issues"

    @property
    def description(self) -> str:
        return "List the issues in a Linear project"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"projectId": string("Project ID"), "first": FIRST}, required=["projectId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        issues = await self._crud.list_project_issues(
            kwargs["projectId"], int(kwargs.get("first") or 50)
        )
        return ToolResult(
            success=True,
            data={"issues": [i.summary() for i in issues], "count": len(issues)},
        )


# ---------------------------------------------------------------------------
# Milestones
# ---------------------------------------------------------------------------

class CreateMilestoneTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_create_milestone"

    @property
    def description(self) -> str:
        return "Create a milestone in a project you lead"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {
                "projectId": string("Project ID"),
                "name": string("Milestone name"),
                "description": string("Milestone description"),
                "targetDate": string("Target date (YYYY-MM-DD)"),
                "sortOrder": number("Sort order within the project"),
                "force": FORCE,
            },
            required=["projectId", "name"],
        )

    async def run(self, **kwargs: Any) -> ToolResult:
        milestone = await self._crud.create_milestone(
            kwargs["projectId"],
            kwargs["name"],
            description=kwargs.get("description"),
            target_date=kwargs.get("targetDate"),
            sort_order=kwargs.get("sortOrder"),
            force=bool(kwargs.get("force", False)),
        )
        if milestone is None:
            return ToolResult(success=False, error="Failed to create milestone")
        return ToolResult(success=True, data=milestone.to_dict())


class UpdateMilestoneTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_update_milestone"

    @property
    def description(self) -> str:
        return "Update a milestone in a project you lead. Omitted fields are left alone."

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {
                "milestoneId": string("Milestone ID"),
                "name": string("New name"),
                "description": string("Description", nullable=True),
                "targetDate": string("Target date", nullable=True),
                "sortOrder": number("Sort order"),
                "force": FORCE,
            },
            required=["milestoneId"],
        )

    async def run(self, **kwargs: Any) -> ToolResult:
        milestone = await self._crud.update_milestone(
            kwargs["milestoneId"],
            name=tri_state(kwargs, "name"),
            description=tri_state(kwargs, "description"),
            target_date=tri_state(kwargs, "targetDate"),
            sort_order=tri_state(kwargs, "sortOrder"),
            force=bool(kwargs.get("force", False)),
        )
        if milestone is None:
            return ToolResult(success=False, error="Failed to update milestone")
        return ToolResult(success=True, data=milestone.to_dict())


class DeleteMilestoneTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_delete_milestone"

    @property
    def description(self) -> str:
        return "Delete a milestone from a project you lead"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"milestoneId": string("Milestone ID"), "force": FORCE}, required=["milestoneId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        deleted = await self._crud.delete_milestone(
            kwargs["milestoneId"], force=bool(kwargs.get("force", False))
        )
        if not deleted:
            return ToolResult(success=False, error="Failed to delete milestone")
        return ToolResult(success=True, output="Milestone deleted successfully")


class ListMilestonesTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_list_milestones"

    @property
    def description(self) -> str:
        return "List the milestones of a project"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"projectId": string("Project ID"), "first": FIRST}, required=["projectId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        milestones = await self._crud.list_milestones(
            kwargs["projectId"], int(kwargs.get("first") or 50)
        )
        return ToolResult(
            success=True,
            data={"milestones": [m.to_dict() for m in milestones], "count": len(milestones)},
        )
