"""Shared fixtures: an in-memory Linear GraphQL backend behind httpx.MockTransport."""

from __future__ import annotations

import json
from itertools import count
from typing import Any

import httpx
import pytest

from linear_opencode.config import LinearConfig
from linear_opencode.linear.api import operation_name
from linear_opencode.linear.context import LinearContext
from linear_opencode.linear.crud import LinearCRUD

ME = "user-me"
OTHER = "user-other"
TIMESTAMP = "2025-01-01T00:00:00.000Z"


class FakeLinear:
    """Just enough of the Linear GraphQL API to exercise the CRUD client.

    Requests are dispatched on the operation name. Unknown IDs produce the
    ``Entity not found`` error Linear returns.
    """

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {
            ME: {"id": ME, "name": "Me", "displayName": "me", "email": "me@example.com"},
            OTHER: {"id": OTHER, "name": "Other", "displayName": "other", "email": "o@example.com"},
        }
        self.teams = {"team-1": {"id": "team-1", "key": "ENG", "name": "Engineering"}}
        self.states = {
            "state-todo": {"id": "state-todo", "name": "Todo", "type": "unstarted", "color": "#e2e2e2", "description": None},
            "state-done": {"id": "state-done", "name": "Done", "type": "completed", "color": "#5e6ad2", "description": "Finished"},
        }
        self.labels = {
            "label-bug": {"id": "label-bug", "name": "Bug", "color": "#eb5757", "description": None},
            "label-feature": {"id": "label-feature", "name": "Feature", "color": "#bb87fc", "description": None},
        }
        self.issues: dict[str, dict[str, Any]] = {}
        self.comments: dict[str, dict[str, Any]] = {}
        self.projects: dict[str, dict[str, Any]] = {}
        self.milestones: dict[str, dict[str, Any]] = {}
        self.relations: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.viewer_failures = 0
        self._ids = count(1)

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def _next(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def add_issue(self, title: str = "An issue", creator: str = ME, **fields: Any) -> str:
        issue_id = self._next("issue")
        number = len(self.issues) + 1
        self.issues[issue_id] = {
            "id": issue_id,
            "identifier": f"ENG-{number}",
            "title": title,
            "description": None,
            "priority": 0,
            "creatorId": creator,
            "teamId": "team-1",
            "stateId": None,
            "assigneeId": None,
            "parentId": None,
            "projectId": None,
            "labelIds": [],
            **fields,
        }
        return issue_id

    def add_comment(self, issue_id: str, body: str = "hello", author: str = ME) -> str:
        comment_id = self._next("comment")
        self.comments[comment_id] = {"id": comment_id, "issueId": issue_id, "body": body, "userId": author}
        return comment_id

    def add_project(self, name: str = "Project", lead: str | None = ME) -> str:
        project_id = self._next("project")
        self.projects[project_id] = {
            "id": project_id,
            "name": name,
            "description": None,
            "leadId": lead,
            "teamIds": ["team-1"],
        }
        return project_id

    def add_milestone(self, project_id: str, name: str = "M1") -> str:
        milestone_id = self._next("milestone")
        self.milestones[milestone_id] = {"id": milestone_id, "name": name, "projectId": project_id}
        return milestone_id

    def add_relation(self, issue_id: str, related_id: str, type: str = "blocks") -> str:
        relation_id = self._next("relation")
        self.relations[relation_id] = {
            "id": relation_id,
            "type": type,
            "issueId": issue_id,
            "relatedIssueId": related_id,
        }
        return relation_id

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _find_issue(self, key: str) -> dict[str, Any] | None:
        if key in self.issues:
            return self.issues[key]
        for issue in self.issues.values():
            if issue["identifier"] == key:
                return issue
        return None

    def _issue_node(self, issue: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": issue["id"],
            "identifier": issue["identifier"],
            "title": issue["title"],
            "description": issue.get("description"),
            "priority": issue.get("priority"),
            "url": f"https://linear.app/acme/issue/{issue['identifier']}",
            "createdAt": TIMESTAMP,
            "updatedAt": TIMESTAMP,
            "creator": {"id": issue["creatorId"]},
            "state": self.states.get(issue.get("stateId") or ""),
            "assignee": self.users.get(issue.get("assigneeId") or ""),
            "team": self.teams.get(issue["teamId"]),
            "parent": {"id": issue["parentId"]} if issue.get("parentId") else None,
            "project": {"id": issue["projectId"]} if issue.get("projectId") else None,
            "labels": {
                "nodes": [
                    {"id": lid, "name": self.labels[lid]["name"]} for lid in issue.get("labelIds", [])
                ]
            },
        }

    def _comment_node(self, comment: dict[str, Any]) -> dict[str, Any]:
        issue = self.issues.get(comment["issueId"])
        return {
            "id": comment["id"],
            "body": comment["body"],
            "url": f"https://linear.app/acme/comment/{comment['id']}",
            "createdAt": TIMESTAMP,
            "updatedAt": TIMESTAMP,
            "user": self.users.get(comment["userId"]),
            "issue": {
                "id": issue["id"],
                "identifier": issue["identifier"],
                "title": issue["title"],
                "url": "",
            }
            if issue
            else None,
        }

    def _project_node(self, project: dict[str, Any]) -> dict[str, Any]:
        lead = self.users.get(project.get("leadId") or "")
        return {
            "id": project["id"],
            "name": project["name"],
            "description": project.get("description"),
            "content": project.get("content"),
            "color": project.get("color"),
            "icon": project.get("icon"),
            "priority": project.get("priority"),
            "startDate": project.get("startDate"),
            "targetDate": project.get("targetDate"),
            "url": f"https://linear.app/acme/project/{project['id']}",
            "lead": {"id": lead["id"], "name": lead["name"]} if lead else None,
            "teams": {"nodes": [{"id": t} for t in project.get("teamIds", [])]},
        }

    def _milestone_node(self, milestone: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": milestone["id"],
            "name": milestone["name"],
            "description": milestone.get("description"),
            "targetDate": milestone.get("targetDate"),
            "sortOrder": milestone.get("sortOrder", 0.0),
            "project": {"id": milestone["projectId"]},
        }

    def _relation_node(self, relation: dict[str, Any]) -> dict[str, Any]:
        issue = self.issues[relation["issueId"]]
        related = self.issues[relation["relatedIssueId"]]
        return {
            "id": relation["id"],
            "type": relation["type"],
            "createdAt": TIMESTAMP,
            "issue": {
                "id": issue["id"],
                "identifier": issue["identifier"],
                "title": issue["title"],
                "creator": {"id": issue["creatorId"]},
            },
            "relatedIssue": {
                "id": related["id"],
                "identifier": related["identifier"],
                "title": related["title"],
            },
        }

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        op = operation_name(body["query"])
        variables = body.get("variables") or {}
        self.calls.append((op, variables))
        try:
            data = getattr(self, f"_op_{op}")(variables)
        except KeyError:
            return httpx.Response(
                200,
                json={
                    "data": None,
                    "errors": [{"message": "Entity not found", "extensions": {"code": "NOT_FOUND"}}],
                },
            )
        except PermissionError as e:
            return httpx.Response(
                200,
                json={"data": None, "errors": [{"message": str(e), "extensions": {"code": "AUTHENTICATION_ERROR"}}]},
            )
        return httpx.Response(200, json={"data": data})

    def _issue_or_raise(self, key: str) -> dict[str, Any]:
        issue = self._find_issue(key)
        if issue is None:
            raise KeyError(key)
        return issue

    # Identity and team data

    def _op_Viewer(self, v: dict[str, Any]) -> dict[str, Any]:
        if self.viewer_failures > 0:
            self.viewer_failures -= 1
            raise PermissionError("Authentication required, not authenticated")
        return {"viewer": self.users[ME]}

    def _op_User(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"user": self.users[v["id"]]}

    def _op_Teams(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"teams": {"nodes": list(self.teams.values())[: v["first"]]}}

    def _op_Team(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"team": self.teams[v["id"]]}

    def _op_TeamStates(self, v: dict[str, Any]) -> dict[str, Any]:
        if v["id"] not in self.teams:
            raise KeyError(v["id"])
        return {"team": {"states": {"nodes": list(self.states.values())}}}

    def _op_TeamLabels(self, v: dict[str, Any]) -> dict[str, Any]:
        if v["id"] not in self.teams:
            raise KeyError(v["id"])
        return {"team": {"labels": {"nodes": list(self.labels.values())}}}

    def _op_WorkflowState(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"workflowState": self.states[v["id"]]}

    def _op_IssueLabel(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"issueLabel": self.labels[v["id"]]}

    # Issues

    def _op_Issue(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"issue": self._issue_node(self._issue_or_raise(v["id"]))}

    def _op_Issues(self, v: dict[str, Any]) -> dict[str, Any]:
        nodes = [self._issue_node(i) for i in self.issues.values()][: v["first"]]
        return {"issues": {"nodes": nodes}}

    def _op_IssueChildren(self, v: dict[str, Any]) -> dict[str, Any]:
        parent = self._issue_or_raise(v["id"])
        children = [self._issue_node(i) for i in self.issues.values() if i.get("parentId") == parent["id"]]
        return {"issue": {"children": {"nodes": children[: v["first"]]}}}

    def _op_IssueCreate(self, v: dict[str, Any]) -> dict[str, Any]:
        fields = dict(v["input"])
        issue_id = self.add_issue(fields.pop("title"), creator=ME, teamId=fields.pop("teamId"))
        self.issues[issue_id].update(fields)
        return {"issueCreate": {"success": True, "issue": self._issue_node(self.issues[issue_id])}}

    def _op_IssueUpdate(self, v: dict[str, Any]) -> dict[str, Any]:
        issue = self._issue_or_raise(v["id"])
        issue.update(v["input"])
        if issue.get("labelIds") is None:
            issue["labelIds"] = []
        return {"issueUpdate": {"success": True, "issue": self._issue_node(issue)}}

    def _op_IssueDelete(self, v: dict[str, Any]) -> dict[str, Any]:
        del self.issues[self._issue_or_raise(v["id"])["id"]]
        return {"issueDelete": {"success": True}}

    # Comments

    def _op_Comment(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"comment": self._comment_node(self.comments[v["id"]])}

    def _op_Comments(self, v: dict[str, Any]) -> dict[str, Any]:
        issue_id = (v.get("filter") or {}).get("issue", {}).get("id", {}).get("eq")
        nodes = [
            self._comment_node(c)
            for c in self.comments.values()
            if issue_id is None or c["issueId"] == issue_id
        ]
        return {"comments": {"nodes": nodes[: v["first"]]}}

    def _op_CommentCreate(self, v: dict[str, Any]) -> dict[str, Any]:
        comment_id = self.add_comment(v["input"]["issueId"], v["input"]["body"], author=ME)
        return {"commentCreate": {"success": True, "comment": self._comment_node(self.comments[comment_id])}}

    def _op_CommentUpdate(self, v: dict[str, Any]) -> dict[str, Any]:
        comment = self.comments[v["id"]]
        comment.update(v["input"])
        return {"commentUpdate": {"success": True, "comment": self._comment_node(comment)}}

    def _op_CommentDelete(self, v: dict[str, Any]) -> dict[str, Any]:
        del self.comments[v["id"]]
        return {"commentDelete": {"success": True}}

    # Projects and milestones

    def _op_Project(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"project": self._project_node(self.projects[v["id"]])}

    def _op_Projects(self, v: dict[str, Any]) -> dict[str, Any]:
        mine = ((v.get("filter") or {}).get("lead") or {}).get("isMe", {}).get("eq")
        nodes = [
            self._project_node(p)
            for p in self.projects.values()
            if not mine or p.get("leadId") == ME
        ]
        return {"projects": {"nodes": nodes[: v["first"]]}}

    def _op_ProjectIssues(self, v: dict[str, Any]) -> dict[str, Any]:
        project = self.projects[v["id"]]
        nodes = [self._issue_node(i) for i in self.issues.values() if i.get("projectId") == project["id"]]
        return {"project": {"issues": {"nodes": nodes[: v["first"]]}}}

    def _op_ProjectCreate(self, v: dict[str, Any]) -> dict[str, Any]:
        fields = dict(v["input"])
        project_id = self.add_project(fields.pop("name"), lead=fields.pop("leadId", None))
        self.projects[project_id].update(fields)
        return {"projectCreate": {"success": True, "project": self._project_node(self.projects[project_id])}}

    def _op_ProjectUpdate(self, v: dict[str, Any]) -> dict[str, Any]:
        project = self.projects[v["id"]]
        project.update(v["input"])
        return {"projectUpdate": {"success": True, "project": self._project_node(project)}}

    def _op_ProjectDelete(self, v: dict[str, Any]) -> dict[str, Any]:
        del self.projects[v["id"]]
        return {"projectDelete": {"success": True}}

    def _op_ProjectMilestone(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"projectMilestone": self._milestone_node(self.milestones[v["id"]])}

    def _op_ProjectMilestones(self, v: dict[str, Any]) -> dict[str, Any]:
        project = self.projects[v["id"]]
        nodes = [self._milestone_node(m) for m in self.milestones.values() if m["projectId"] == project["id"]]
        return {"project": {"projectMilestones": {"nodes": nodes[: v["first"]]}}}

    def _op_ProjectMilestoneCreate(self, v: dict[str, Any]) -> dict[str, Any]:
        fields = dict(v["input"])
        milestone_id = self.add_milestone(fields.pop("projectId"), fields.pop("name"))
        self.milestones[milestone_id].update(fields)
        node = self._milestone_node(self.milestones[milestone_id])
        return {"projectMilestoneCreate": {"success": True, "projectMilestone": node}}

    def _op_ProjectMilestoneUpdate(self, v: dict[str, Any]) -> dict[str, Any]:
        milestone = self.milestones[v["id"]]
        milestone.update(v["input"])
        node = self._milestone_node(milestone)
        return {"projectMilestoneUpdate": {"success": True, "projectMilestone": node}}

    def _op_ProjectMilestoneDelete(self, v: dict[str, Any]) -> dict[str, Any]:
        del self.milestones[v["id"]]
        return {"projectMilestoneDelete": {"success": True}}

    # Relations

    def _op_IssueRelation(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"issueRelation": self._relation_node(self.relations[v["id"]])}

    def _op_IssueRelations(self, v: dict[str, Any]) -> dict[str, Any]:
        issue = self._issue_or_raise(v["id"])
        outgoing = [self._relation_node(r) for r in self.relations.values() if r["issueId"] == issue["id"]]
        incoming = [
            self._relation_node(r) for r in self.relations.values() if r["relatedIssueId"] == issue["id"]
        ]
        return {
            "issue": {
                "relations": {"nodes": outgoing[: v["first"]]},
                "inverseRelations": {"nodes": incoming[: v["first"]]},
            }
        }

    def _op_IssueRelationCreate(self, v: dict[str, Any]) -> dict[str, Any]:
        data = v["input"]
        relation_id = self.add_relation(data["issueId"], data["relatedIssueId"], data["type"])
        node = self._relation_node(self.relations[relation_id])
        return {"issueRelationCreate": {"success": True, "issueRelation": node}}

    def _op_IssueRelationDelete(self, v: dict[str, Any]) -> dict[str, Any]:
        del self.relations[v["id"]]
        return {"issueRelationDelete": {"success": True}}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fake() -> FakeLinear:
    return FakeLinear()


@pytest.fixture
def linear_config() -> LinearConfig:
    return LinearConfig(api_key="lin_api_test", auth_retry_delay=0)


@pytest.fixture
async def context(fake, linear_config):
    ctx = LinearContext(linear_config, transport=httpx.MockTransport(fake.handle))
    yield ctx
    await ctx.close()


@pytest.fixture
def crud(context) -> LinearCRUD:
    return LinearCRUD(context)
