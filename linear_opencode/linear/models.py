"""Typed views over Linear GraphQL nodes."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


def _nodes(connection: dict[str, Any] | None) -> list[dict[str, Any]]:
    if not connection:
        return []
    return [n for n in connection.get("nodes", []) if n]


def _id(node: dict[str, Any] | None) -> str | None:
    return node.get("id") if node else None


@dataclass
class User:
    id: str
    name: str = ""
    display_name: str = ""
    email: str = ""

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> User:
        return cls(
            id=node["id"],
            name=node.get("name") or "",
            display_name=node.get("displayName") or "",
            email=node.get("email") or "",
        )

    @property
    def label(self) -> str:
        return self.display_name or self.name or self.id


@dataclass
class Team:
    id: str
    key: str = ""
    name: str = ""

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> Team:
        return cls(id=node["id"], key=node.get("key") or "", name=node.get("name") or "")


@dataclass
class WorkflowState:
    id: str
    name: str = ""
    type: str = ""
    color: str = ""
    description: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> WorkflowState:
        return cls(
            id=node["id"],
            name=node.get("name") or "",
            type=node.get("type") or "",
            color=node.get("color") or "",
            description=node.get("description"),
        )


@dataclass
class IssueLabel:
    id: str
    name: str = ""
    color: str = ""
    description: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> IssueLabel:
        return cls(
            id=node["id"],
            name=node.get("name") or "",
            color=node.get("color") or "",
            description=node.get("description"),
        )


@dataclass
class Issue:
    id: str
    identifier: str = ""
    title: str = ""
    description: str | None = None
    priority: int | None = None
    url: str = ""
    created_at: str = ""
    updated_at: str = ""
    creator_id: str | None = None
    state: WorkflowState | None = None
    assignee: User | None = None
    team: Team | None = None
    parent_id: str | None = None
    project_id: str | None = None
    label_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> Issue:
        state = node.get("state")
        assignee = node.get("assignee")
        team = node.get("team")
        return cls(
            id=node["id"],
            identifier=node.get("identifier") or "",
            title=node.get("title") or "",
            description=node.get("description"),
            priority=node.get("priority"),
            url=node.get("url") or "",
            created_at=node.get("createdAt") or "",
            updated_at=node.get("updatedAt") or "",
            creator_id=_id(node.get("creator")),
            state=WorkflowState.from_node(state) if state else None,
            assignee=User.from_node(assignee) if assignee else None,
            team=Team.from_node(team) if team else None,
            parent_id=_id(node.get("parent")),
            project_id=_id(node.get("project")),
            label_ids=[label["id"] for label in _nodes(node.get("labels"))],
        )

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "identifier": self.identifier,
            "title": self.title,
            "status": self.state.name if self.state else "Unknown",
            "assignee": self.assignee.label if self.assignee else "Unassigned",
            "createdAt": self.created_at,
            "url": self.url,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.summary(),
            "description": self.description,
            "priority": self.priority,
            "team": self.team.key if self.team else None,
            "parentId": self.parent_id,
            "projectId": self.project_id,
            "labelIds": list(self.label_ids),
            "creatorId": self.creator_id,
        }


@dataclass
class Comment:
    id: str
    body: str = ""
    url: str = ""
    created_at: str = ""
    updated_at: str = ""
    user: User | None = None
    issue_id: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> Comment:
        user = node.get("user")
        return cls(
            id=node["id"],
            body=node.get("body") or "",
            url=node.get("url") or "",
            created_at=node.get("createdAt") or "",
            updated_at=node.get("updatedAt") or "",
            user=User.from_node(user) if user else None,
            issue_id=_id(node.get("issue")),
        )

    @property
    def author_id(self) -> str | None:
        return self.user.id if self.user else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "body": self.body,
            "author": self.user.label if self.user else "Unknown",
            "issueId": self.issue_id,
            "createdAt": self.created_at,
            "url": self.url,
        }


@dataclass
class Project:
    id: str
    name: str = ""
    description: str | None = None
    content: str | None = None
    color: str | None = None
    icon: str | None = None
    priority: int | None = None
    start_date: str | None = None
    target_date: str | None = None
    url: str = ""
    lead_id: str | None = None
    lead_name: str | None = None
    team_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> Project:
        lead = node.get("lead")
        return cls(
            id=node["id"],
            name=node.get("name") or "",
            description=node.get("description"),
            content=node.get("content"),
            color=node.get("color"),
            icon=node.get("icon"),
            priority=node.get("priority"),
            start_date=node.get("startDate"),
            target_date=node.get("targetDate"),
            url=node.get("url") or "",
            lead_id=_id(lead),
            lead_name=lead.get("name") if lead else None,
            team_ids=[team["id"] for team in _nodes(node.get("teams"))],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "lead": self.lead_name or "None",
            "leadId": self.lead_id,
            "startDate": self.start_date,
            "targetDate": self.target_date,
            "teamIds": list(self.team_ids),
            "url": self.url,
        }


@dataclass
class ProjectMilestone:
    id: str
    name: str = ""
    description: str | None = None
    target_date: str | None = None
    sort_order: float | None = None
    project_id: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> ProjectMilestone:
        return cls(
            id=node["id"],
            name=node.get("name") or "",
            description=node.get("description"),
            target_date=node.get("targetDate"),
            sort_order=node.get("sortOrder"),
            project_id=_id(node.get("project")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "targetDate": self.target_date,
            "sortOrder": self.sort_order,
            "projectId": self.project_id,
        }


@dataclass
class IssueRef:
    id: str
    identifier: str = ""
    title: str = ""
    creator_id: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> IssueRef:
        return cls(
            id=node["id"],
            identifier=node.get("identifier") or "",
            title=node.get("title") or "",
            creator_id=_id(node.get("creator")),
        )


@dataclass
class IssueRelation:
    id: str
    type: str
    created_at: str = ""
    issue: IssueRef | None = None
    related_issue: IssueRef | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> IssueRelation:
        issue = node.get("issue")
        related = node.get("relatedIssue")
        return cls(
            id=node["id"],
            type=node.get("type") or "",
            created_at=node.get("createdAt") or "",
            issue=IssueRef.from_node(issue) if issue else None,
            related_issue=IssueRef.from_node(related) if related else None,
        )

    def to_dict(self) -> dict[str, Any]:
        def ref(r: IssueRef | None) -> dict[str, Any] | None:
            if r is None:
                return None
            return {"id": r.id, "identifier": r.identifier, "title": r.title}

        return {
            "id": self.id,
            "type": self.type,
            "issue": ref(self.issue),
            "relatedIssue": ref(self.related_issue),
            "createdAt": self.created_at,
        }


def plain(obj: Any) -> dict[str, Any]:
    """Dataclass to plain dict (snake_case keys)."""
    return asdict(obj)
