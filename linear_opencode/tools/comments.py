"""Comment tools."""

from __future__ import annotations

from typing import Any

from linear_opencode.tools.base import FIRST, FORCE, LinearTool, ToolResult, schema, string


class AddCommentTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_add_comment"

    @property
    def description(self) -> str:
        return "Add a comment to a Linear issue"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {"issueId": string("Issue ID"), "body": string("Comment body in markdown")},
            required=["issueId", "body"],
        )

    async def run(self, **kwargs: Any) -> ToolResult:
        comment = await self._crud.create_comment(kwargs["issueId"], kwargs["body"])
        if comment is None:
            return ToolResult(success=False, error="Failed to add comment")
        return ToolResult(
            success=True,
            data={"id": comment.id, "body": comment.body, "createdAt": comment.created_at},
        )


class GetCommentTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_get_comment"

    @property
    def description(self) -> str:
        return "Get a Linear comment by ID"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"commentId": string("Comment ID")}, required=["commentId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        comment_id: str = kwargs["commentId"]
        comment = await self._crud.get_comment(comment_id)
        if comment is None:
            return ToolResult(success=False, error=f"Comment {comment_id} not found")
        return ToolResult(success=True, data=comment.to_dict())


class UpdateCommentTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_update_comment"

    @property
    def description(self) -> str:
        return "Edit a comment you wrote. Pass force=true to edit someone else's comment."

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {"commentId": string("Comment ID"), "body": string("New body"), "force": FORCE},
            required=["commentId", "body"],
        )

    async def run(self, **kwargs: Any) -> ToolResult:
        comment = await self._crud.update_comment(
            kwargs["commentId"], kwargs["body"], force=bool(kwargs.get("force", False))
        )
        if comment is None:
            return ToolResult(success=False, error="Failed to update comment")
        return ToolResult(success=True, data=comment.to_dict())


class DeleteCommentTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_delete_comment"

    @property
    def description(self) -> str:
        return "Delete a comment you wrote. Pass force=true to delete someone else's comment."

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"commentId": string("Comment ID"), "force": FORCE}, required=["commentId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        deleted = await self._crud.delete_comment(
            kwargs["commentId"], force=bool(kwargs.get("force", False))
        )
        if not deleted:
            return ToolResult(success=False, error="Failed to delete comment")
        return ToolResult(success=True, output="Comment deleted successfully")


class ListCommentsTool(LinearTool):
    @property
    def name(self) -> str:
        return "linear_list_comments"

    @property
    def description(self) -> str:
        return "List comments for a Linear issue"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({"issueId": string("Issue ID"), "first": FIRST}, required=["issueId"])

    async def run(self, **kwargs: Any) -> ToolResult:
        comments = await self._crud.list_comments(kwargs["issueId"], int(kwargs.get("first") or 50))
        return ToolResult(
            success=True,
            data={
                "comments": [
                    {
                        "id": c.id,
                        "body": c.body,
                        "author": c.user.label if c.user else "Unknown",
                        "createdAt": c.created_at,
                    }
                    for c in comments
                ],
                "count": len(comments),
            },
        )
