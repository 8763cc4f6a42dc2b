"""Ownership-gated CRUD operations over Linear entities.

Reads of unknown IDs return ``None``. Updates and deletes of unknown IDs
raise :class:`NotFoundError`. Every mutation of an existing entity first
passes the ownership gate: the authenticated user must be the entity's
creator (issues, relations), author (comments) or lead (projects and their
milestones), unless the caller passes ``force=True``.

Updates are tri-state. An argument left at :data:`UNSET` is not sent, an
explicit ``None`` clears the field, anything else is re-resolved against
Linear and set.
"""

from __future__ import annotations

import asyncio
import enum
from typing import Any, Awaitable, Callable, Iterable

from linear_opencode.errors import LinearAPIError, LinearOpenCodeError, NotFoundError, OwnershipError
from linear_opencode.linear import queries
from linear_opencode.linear.api import is_not_found
from linear_opencode.linear.context import LinearContext
from linear_opencode.linear.models import (
    Comment,
    Issue,
    IssueLabel,
    IssueRelation,
    Project,
    ProjectMilestone,
    Team,
    User,
    WorkflowState,
)
from linear_opencode.utils.logging import get_logger

log = get_logger(__name__)

RELATION_TYPES = ("blocks", "duplicate", "related", "similar")
RELATION_DIRECTIONS = ("from", "to", "both")


class _Unset(enum.Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset.UNSET

Resolver = Callable[[str], Awaitable["str | None"]]


class LinearCRUD:
    def __init__(self, context: LinearContext, enable_safety_checks: bool = True) -> None:
        self._context = context
        self._enable_safety_checks = enable_safety_checks

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    async def _query(self, document: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        api = await self._context.client()
        return await api.execute(document, variables)

    async def _fetch(
        self, document: str, key: str, variables: dict[str, Any]
    ) -> dict[str, Any] | None:
        try:
            data = await self._query(document, variables)
        except LinearAPIError as e:
            if is_not_found(e):
                return None
            raise
        return data.get(key)

    async def _mutate(
        self, document: str, key: str, entity_key: str, variables: dict[str, Any]
    ) -> dict[str, Any] | None:
        data = await self._query(document, variables)
        payload = data.get(key) or {}
        if not payload.get("success", True):
            log.warning("linear_mutation_unsuccessful", mutation=key)
        return payload.get(entity_key)

    async def _delete(self, document: str, key: str, entity_id: str) -> bool:
        data = await self._query(document, {"id": entity_id})
        return bool((data.get(key) or {}).get("success"))

    async def _resolve(self, document: str, key: str, entity_id: str) -> str | None:
        node = await self._fetch(document, key, {"id": entity_id})
        return node["id"] if node else None

    async def _resolve_user(self, user_id: str) -> str | None:
        return await self._resolve(queries.USER, "user", user_id)

    async def _resolve_state(self, state_id: str) -> str | None:
        return await self._resolve(queries.WORKFLOW_STATE, "workflowState", state_id)

    async def _resolve_issue(self, issue_id: str) -> str | None:
        return await self._resolve(queries.ISSUE, "issue", issue_id)

    async def _resolve_project(self, project_id: str) -> str | None:
        return await self._resolve(queries.PROJECT, "project", project_id)

    async def _resolve_label(self, label_id: str) -> str | None:
        return await self._resolve(queries.ISSUE_LABEL, "issueLabel", label_id)

    async def _resolve_team(self, team_id: str) -> str | None:
        return await self._resolve(queries.TEAM, "team", team_id)

    async def _resolve_ids(self, ids: Iterable[str], resolver: Resolver) -> list[str]:
        """Resolve each ID; unknown IDs are dropped."""
        resolved = await asyncio.gather(*(resolver(i) for i in ids))
        return [r for r in resolved if r]

    async def _set_relationship(
        self,
        target: dict[str, Any],
        field: str,
        value: str | None | _Unset,
        resolver: Resolver,
    ) -> None:
        if value is UNSET:
            return
        if value is None:
            target[field] = None
            return
        resolved = await resolver(value)
        if resolved is None:
            log.warning("linear_unresolved_reference", field=field, id=value)
            return
        target[field] = resolved

    @staticmethod
    def _set_plain(target: dict[str, Any], **fields: Any) -> None:
        for name, value in fields.items():
            if value is not UNSET:
                target[name] = value

    async def _default_team(self) -> Team | None:
        teams = await self.list_teams(limit=1)
        return teams[0] if teams else None

    async def _team_for(self, team_id: str | None) -> str:
        if team_id:
            resolved = await self._resolve_team(team_id)
            if resolved is None:
                raise NotFoundError("team", team_id)
            return resolved
        team = await self._default_team()
        if team is None:
            raise LinearOpenCodeError("No team found")
        return team.id

    # ------------------------------------------------------------------
    # Identity and ownership
    # ------------------------------------------------------------------

    async def get_current_user(self) -> User:
        return await self._context.viewer()

    async def check_ownership(
        self,
        owner_id: str | None,
        entity_type: str,
        entity_id: str,
        force: bool = False,
    ) -> None:
        if not self._enable_safety_checks or force:
            return
        user = await self.get_current_user()
        if not owner_id or owner_id != user.id:
            raise OwnershipError(entity_type, entity_id)

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    async def create_issue(
        self,
        title: str,
        description: str | None = None,
        team_id: str | None = None,
        assignee_id: str | None = None,
        state_id: str | None = None,
        label_ids: list[str] | None = None,
        priority: int | None = None,
        parent_id: str | None = None,
        project_id: str | None = None,
    ) -> Issue | None:
        """Create an issue; without ``team_id`` the first team is used."""
        data: dict[str, Any] = {"title": title, "teamId": await self._team_for(team_id)}
        if description is not None:
            data["description"] = description
        if assignee_id:
            await self._set_relationship(data, "assigneeId", assignee_id, self._resolve_user)
        if state_id:
            await self._set_relationship(data, "stateId", state_id, self._resolve_state)
        if parent_id:
            await self._set_relationship(data, "parentId", parent_id, self._resolve_issue)
        if project_id:
            await self._set_relationship(data, "projectId", project_id, self._resolve_project)
        if label_ids:
            data["labelIds"] = await self._resolve_ids(label_ids, self._resolve_label)
        if priority is not None:
            data["priority"] = priority

        node = await self._mutate(queries.ISSUE_CREATE, "issueCreate", "issue", {"input": data})
        if node is None:
            return None
        log.info("linear_issue_created", issue=node.get("identifier"))
        return Issue.from_node(node)

    async def get_issue(self, issue_id: str) -> Issue | None:
        node = await self._fetch(queries.ISSUE, "issue", {"id": issue_id})
        return Issue.from_node(node) if node else None

    async def _require_issue(self, issue_id: str) -> Issue:
        issue = await self.get_issue(issue_id)
        if issue is None:
            raise NotFoundError("issue", issue_id)
        return issue

    async def update_issue(
        self,
        issue_id: str,
        *,
        title: str | _Unset = UNSET,
        description: str | None | _Unset = UNSET,
        assignee_id: str | None | _Unset = UNSET,
        state_id: str | None | _Unset = UNSET,
        label_ids: list[str] | None | _Unset = UNSET,
        priority: int | None | _Unset = UNSET,
        parent_id: str | None | _Unset = UNSET,
        project_id: str | None | _Unset = UNSET,
        force: bool = False,
    ) -> Issue | None:
        issue = await self._require_issue(issue_id)
        await self.check_ownership(issue.creator_id, "issue", issue_id, force)

        data: dict[str, Any] = {}
        self._set_plain(data, title=title, description=description, priority=priority)
        await self._set_relationship(data, "assigneeId", assignee_id, self._resolve_user)
        await self._set_relationship(data, "stateId", state_id, self._resolve_state)
        await self._set_relationship(data, "parentId", parent_id, self._resolve_issue)
        await self._set_relationship(data, "projectId", project_id, self._resolve_project)
        if label_ids is not UNSET:
            # None or [] removes every label
            data["labelIds"] = await self._resolve_ids(label_ids or [], self._resolve_label)

        node = await self._mutate(
            queries.ISSUE_UPDATE, "issueUpdate", "issue", {"id": issue.id, "input": data}
        )
        return Issue.from_node(node) if node else None

    async def delete_issue(self, issue_id: str, force: bool = False) -> bool:
        issue = await self._require_issue(issue_id)
        await self.check_ownership(issue.creator_id, "issue", issue_id, force)
        return await self._delete(queries.ISSUE_DELETE, "issueDelete", issue.id)

    async def list_issues(self, limit: int = 50) -> list[Issue]:
        data = await self._query(queries.ISSUES, {"first": limit})
        return [Issue.from_node(n) for n in (data.get("issues") or {}).get("nodes", [])]

    async def list_children(self, parent_id: str, limit: int = 50) -> list[Issue]:
        node = await self._fetch(queries.ISSUE_CHILDREN, "issue", {"id": parent_id, "first": limit})
        if node is None:
            raise NotFoundError("issue", parent_id)
        return [Issue.from_node(n) for n in (node.get("children") or {}).get("nodes", [])]

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def create_comment(self, issue_id: str, body: str) -> Comment | None:
        issue = await self._require_issue(issue_id)
        node = await self._mutate(
            queries.COMMENT_CREATE,
            "commentCreate",
            "comment",
            {"input": {"issueId": issue.id, "body": body}},
        )
        return Comment.from_node(node) if node else None

    async def add_comment(self, issue_id: str, body: str) -> Comment | None:
        """Create a comment with logging around it; used for command replies."""
        log.info("linear_comment_adding", issue_id=issue_id, body_length=len(body))
        log.debug("linear_comment_body", preview=body[:100])
        try:
            comment = await self.create_comment(issue_id, body)
        except Exception as e:
            log.error("linear_comment_failed", issue_id=issue_id, error=str(e))
            raise
        if comment is not None:
            log.info("linear_comment_added", issue_id=issue_id, comment_id=comment.id)
        return comment

    async def get_comment(self, comment_id: str) -> Comment | None:
        node = await self._fetch(queries.COMMENT, "comment", {"id": comment_id})
        return Comment.from_node(node) if node else None

    async def _require_comment(self, comment_id: str) -> Comment:
        comment = await self.get_comment(comment_id)
        if comment is None:
            raise NotFoundError("comment", comment_id)
        return comment

    async def update_comment(self, comment_id: str, body: str, force: bool = False) -> Comment | None:
        comment = await self._require_comment(comment_id)
        await self.check_ownership(comment.author_id, "comment", comment_id, force)
        node = await self._mutate(
            queries.COMMENT_UPDATE,
            "commentUpdate",
            "comment",
            {"id": comment.id, "input": {"body": body}},
        )
        return Comment.from_node(node) if node else None

    async def delete_comment(self, comment_id: str, force: bool = False) -> bool:
        comment = await self._require_comment(comment_id)
        await self.check_ownership(comment.author_id, "comment", comment_id, force)
        return await self._delete(queries.COMMENT_DELETE, "commentDelete", comment.id)

    async def list_comments(self, issue_id: str, limit: int = 50) -> list[Comment]:
        issue = await self._require_issue(issue_id)
        data = await self._query(
            queries.COMMENTS,
            {"first": limit, "filter": {"issue": {"id": {"eq": issue.id}}}},
        )
        return [Comment.from_node(n) for n in (data.get("comments") or {}).get("nodes", [])]

    # ------------------------------------------------------------------
    # Teams, workflow states, labels
    # ------------------------------------------------------------------

    async def list_teams(self, limit: int = 50) -> list[Team]:
        data = await self._query(queries.TEAMS, {"first": limit})
        return [Team.from_node(n) for n in (data.get("teams") or {}).get("nodes", [])]

    async def list_states(self, team_id: str | None = None) -> list[WorkflowState]:
        resolved = await self._team_for(team_id)
        node = await self._fetch(queries.TEAM_STATES, "team", {"id": resolved})
        if node is None:
            raise NotFoundError("team", resolved)
        return [WorkflowState.from_node(n) for n in (node.get("states") or {}).get("nodes", [])]

    async def list_labels(self, team_id: str | None = None) -> list[IssueLabel]:
        resolved = await self._team_for(team_id)
        node = await self._fetch(queries.TEAM_LABELS, "team", {"id": resolved})
        if node is None:
            raise NotFoundError("team", resolved)
        return [IssueLabel.from_node(n) for n in (node.get("labels") or {}).get("nodes", [])]

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    async def create_relation(
        self,
        issue_id: str,
        related_issue_id: str,
        type: str,
        force: bool = False,
    ) -> IssueRelation | None:
        if type not in RELATION_TYPES:
            raise ValueError(f"Invalid relation type '{type}', expected one of {', '.join(RELATION_TYPES)}")
        issue = await self._require_issue(issue_id)
        related = await self.get_issue(related_issue_id)
        if related is None:
            raise NotFoundError("related issue", related_issue_id)
        await self.check_ownership(issue.creator_id, "issue (for creating relations)", issue_id, force)

        node = await self._mutate(
            queries.RELATION_CREATE,
            "issueRelationCreate",
            "issueRelation",
            {"input": {"issueId": issue.id, "relatedIssueId": related.id, "type": type}},
        )
        return IssueRelation.from_node(node) if node else None

    async def get_relation(self, relation_id: str) -> IssueRelation | None:
        node = await self._fetch(queries.RELATION, "issueRelation", {"id": relation_id})
        return IssueRelation.from_node(node) if node else None

    async def list_relations(
        self, issue_id: str, direction: str = "both", limit: int = 50
    ) -> list[IssueRelation]:
        if direction not in RELATION_DIRECTIONS:
            raise ValueError(f"Invalid direction '{direction}', expected one of {', '.join(RELATION_DIRECTIONS)}")
        node = await self._fetch(queries.ISSUE_RELATIONS, "issue", {"id": issue_id, "first": limit})
        if node is None:
            raise NotFoundError("issue", issue_id)

        relations: list[IssueRelation] = []
        if direction in ("from", "both"):
            relations.extend(
                IssueRelation.from_node(n) for n in (node.get("relations") or {}).get("nodes", [])
            )
        if direction in ("to", "both"):
            relations.extend(
                IssueRelation.from_node(n) for n in (node.get("inverseRelations") or {}).get("nodes", [])
            )
        return relations

    async def delete_relation(self, relation_id: str, force: bool = False) -> bool:
        relation = await self.get_relation(relation_id)
        if relation is None:
            raise NotFoundError("issue relation", relation_id)
        creator_id = relation.issue.creator_id if relation.issue else None
        await self.check_ownership(creator_id, "issue relation", relation_id, force)
        return await self._delete(queries.RELATION_DELETE, "issueRelationDelete", relation.id)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def create_project(
        self,
        name: str,
        team_ids: list[str] | None = None,
        description: str | None = None,
        content: str | None = None,
        color: str | None = None,
        icon: str | None = None,
        lead_id: str | None = None,
        member_ids: list[str] | None = None,
        label_ids: list[str] | None = None,
        priority: int | None = None,
        start_date: str | None = None,
        target_date: str | None = None,
        status_id: str | None = None,
    ) -> Project | None:
        """Create a project; without ``team_ids`` the first team is used."""
        if team_ids:
            teams = await self._resolve_ids(team_ids, self._resolve_team)
            if not teams:
                raise NotFoundError("team", ", ".join(team_ids))
        else:
            teams = [await self._team_for(None)]

        data: dict[str, Any] = {"name": name, "teamIds": teams}
        optional = {
            "description": description,
            "content": content,
            "color": color,
            "icon": icon,
            "priority": priority,
            "startDate": start_date,
            "targetDate": target_date,
            "statusId": status_id,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if lead_id:
            await self._set_relationship(data, "leadId", lead_id, self._resolve_user)
        if member_ids:
            data["memberIds"] = await self._resolve_ids(member_ids, self._resolve_user)
        if label_ids:
            data["labelIds"] = await self._resolve_ids(label_ids, self._resolve_label)

        node = await self._mutate(queries.PROJECT_CREATE, "projectCreate", "project", {"input": data})
        if node is None:
            return None
        log.info("linear_project_created", project=node.get("name"))
        return Project.from_node(node)

    async def get_project(self, project_id: str) -> Project | None:
        node = await self._fetch(queries.PROJECT, "project", {"id": project_id})
        return Project.from_node(node) if node else None

    async def _require_project(self, project_id: str) -> Project:
        project = await self.get_project(project_id)
        if project is None:
            raise NotFoundError("project", project_id)
        return project

    async def update_project(
        self,
        project_id: str,
        *,
        name: str | _Unset = UNSET,
        description: str | None | _Unset = UNSET,
        content: str | None | _Unset = UNSET,
        color: str | None | _Unset = UNSET,
        icon: str | None | _Unset = UNSET,
        lead_id: str | None | _Unset = UNSET,
        member_ids: list[str] | None | _Unset = UNSET,
        label_ids: list[str] | None | _Unset = UNSET,
        priority: int | None | _Unset = UNSET,
        start_date: str | None | _Unset = UNSET,
        target_date: str | None | _Unset = UNSET,
        status_id: str | None | _Unset = UNSET,
        team_ids: list[str] | _Unset = UNSET,
        force: bool = False,
    ) -> Project | None:
        project = await self._require_project(project_id)
        await self.check_ownership(project.lead_id, "project", project_id, force)

        data: dict[str, Any] = {}
        self._set_plain(
            data,
            name=name,
            description=description,
            content=content,
            color=color,
            icon=icon,
            priority=priority,
            startDate=start_date,
            targetDate=target_date,
            statusId=status_id,
        )
        await self._set_relationship(data, "leadId", lead_id, self._resolve_user)
        if member_ids is not UNSET:
            data["memberIds"] = await self._resolve_ids(member_ids or [], self._resolve_user)
        if label_ids is not UNSET:
            data["labelIds"] = await self._resolve_ids(label_ids or [], self._resolve_label)
        if team_ids is not UNSET:
            data["teamIds"] = await self._resolve_ids(team_ids, self._resolve_team)

        node = await self._mutate(
            queries.PROJECT_UPDATE, "projectUpdate", "project", {"id": project.id, "input": data}
        )
        return Project.from_node(node) if node else None

    async def delete_project(self, project_id: str, force: bool = False) -> bool:
        project = await self._require_project(project_id)
        await self.check_ownership(project.lead_id, "project", project_id, force)
        return await self._delete(queries.PROJECT_DELETE, "projectDelete", project.id)

    async def list_projects(
        self, filter: dict[str, Any] | None = None, limit: int = 50
    ) -> list[Project]:
        data = await self._query(queries.PROJECTS, {"first": limit, "filter": filter})
        return [Project.from_node(n) for n in (data.get("projects") or {}).get("nodes", [])]

    async def list_my_projects(self, limit: int = 50) -> list[Project]:
        return await self.list_projects({"lead": {"isMe": {"eq": True}}}, limit)

    async def list_project_issues(self, project_id: str, limit: int = 50) -> list[Issue]:
        node = await self._fetch(queries.PROJECT_ISSUES, "project", {"id": project_id, "first": limit})
        if node is None:
            raise NotFoundError("project", project_id)
        return [Issue.from_node(n) for n in (node.get("issues") or {}).get("nodes", [])]

    # ------------------------------------------------------------------
    # Project milestones
    # ------------------------------------------------------------------

    async def create_milestone(
        self,
        project_id: str,
        name: str,
        description: str | None = None,
        target_date: str | None = None,
        sort_order: float | None = None,
        force: bool = False,
    ) -> ProjectMilestone | None:
        project = await self._require_project(project_id)
        await self.check_ownership(project.lead_id, "project (for creating milestones)", project_id, force)

        data: dict[str, Any] = {"name": name, "projectId": project.id}
        optional = {"description": description, "targetDate": target_date, "sortOrder": sort_order}
        data.update({k: v for k, v in optional.items() if v is not None})

        node = await self._mutate(
            queries.MILESTONE_CREATE, "projectMilestoneCreate", "projectMilestone", {"input": data}
        )
        return ProjectMilestone.from_node(node) if node else None

    async def get_milestone(self, milestone_id: str) -> ProjectMilestone | None:
        node = await self._fetch(queries.MILESTONE, "projectMilestone", {"id": milestone_id})
        return ProjectMilestone.from_node(node) if node else None

    async def _milestone_with_project(self, milestone_id: str) -> tuple[ProjectMilestone, Project]:
        milestone = await self.get_milestone(milestone_id)
        if milestone is None:
            raise NotFoundError("project milestone", milestone_id)
        project = await self.get_project(milestone.project_id) if milestone.project_id else None
        if project is None:
            raise NotFoundError("project for milestone", milestone_id)
        return milestone, project

    async def update_milestone(
        self,
        milestone_id: str,
        *,
        name: str | _Unset = UNSET,
        description: str | None | _Unset = UNSET,
        target_date: str | None | _Unset = UNSET,
        sort_order: float | _Unset = UNSET,
        force: bool = False,
    ) -> ProjectMilestone | None:
        milestone, project = await self._milestone_with_project(milestone_id)
        await self.check_ownership(project.lead_id, "project milestone", milestone_id, force)

        data: dict[str, Any] = {}
        self._set_plain(
            data, name=name, description=description, targetDate=target_date, sortOrder=sort_order
        )
        node = await self._mutate(
            queries.MILESTONE_UPDATE,
            "projectMilestoneUpdate",
            "projectMilestone",
            {"id": milestone.id, "input": data},
        )
        return ProjectMilestone.from_node(node) if node else None

    async def delete_milestone(self, milestone_id: str, force: bool = False) -> bool:
        milestone, project = await self._milestone_with_project(milestone_id)
        await self.check_ownership(project.lead_id, "project milestone", milestone_id, force)
        return await self._delete(queries.MILESTONE_DELETE, "projectMilestoneDelete", milestone.id)

    async def list_milestones(self, project_id: str, limit: int = 50) -> list[ProjectMilestone]:
        node = await self._fetch(
            queries.PROJECT_MILESTONES, "project", {"id": project_id, "first": limit}
        )
        if node is None:
            raise NotFoundError("project", project_id)
        return [
            ProjectMilestone.from_node(n)
            for n in (node.get("projectMilestones") or {}).get("nodes", [])
        ]
