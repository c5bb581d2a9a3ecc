from todo_api.client.api import ApiClient, ApiError
from todo_api.client.session import ClientSession, SessionGuard
from todo_api.client.storage import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "ApiClient",
    "ApiError",
    "ClientSession",
    "SessionGuard",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
]
