from todo_api.models.user import User
from todo_api.models.refresh_token import RefreshToken
from todo_api.models.todo import Todo, TodoPriority, TodoStatus
from todo_api.models.audit_log import AuditLog

__all__ = ["User", "RefreshToken", "Todo", "TodoPriority", "TodoStatus", "AuditLog"]
