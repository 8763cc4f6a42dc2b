"""Linear API access: GraphQL transport, client context, entity models, CRUD."""

from linear_opencode.linear.context import LinearContext
from linear_opencode.linear.crud import UNSET, LinearCRUD

__all__ = ["LinearContext", "LinearCRUD", "UNSET"]
