from datetime import timedelta

import pytest

from todo_api.core.security import issue_access_token, utcnow
from todo_api.tests.utils import auth_headers, register


@pytest.fixture()
def alice(client):
    return register(client).json()["data"]


@pytest.fixture()
def headers(alice):
    return auth_headers(alice["token"])


def create(client, headers, **body):
    body.setdefault("title", "Buy milk")
    response = client.post("/todos", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_todos_require_bearer_token(client):
    response = client.get("/todos")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"
    assert response.headers["www-authenticate"] == "Bearer"


def test_todos_reject_invalid_token(client):
    response = client.get("/todos", headers=auth_headers("garbage"))
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


def test_todos_reject_expired_token(client, alice):
    issued = utcnow() - timedelta(days=2)
    token = issue_access_token(alice["user"]["id"], alice["user"]["email"], now=issued)
    response = client.get("/todos", headers=auth_headers(token))
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


def test_create_and_get_todo(client, headers, alice):
    todo = create(client, headers, title="Write report", description="Q3", priority="high")
    assert todo["userId"] == alice["user"]["id"]
    assert todo["status"] == "pending"
    assert todo["priority"] == "high"
    assert todo["dueDate"] is None

    response = client.get(f"/todos/{todo['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Write report"


def test_create_todo_validation(client, headers):
    for body in ({"title": ""}, {"title": "x" * 201}, {"title": "ok", "priority": "urgent"}):
        response = client.post("/todos", json=body, headers=headers)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_list_todos_paginates_and_filters(client, headers):
    for index in range(5):
        create(client, headers, title=f"todo {index}", priority="low" if index % 2 else "high")

    response = client.get("/todos", params={"page": 1, "pageSize": 2}, headers=headers)
    page = response.json()["data"]
    assert page["total"] == 5
    assert page["pageSize"] == 2
    assert page["totalPages"] == 3
    assert [item["title"] for item in page["items"]] == ["todo 4", "todo 3"]

    response = client.get("/todos", params={"priority": "low"}, headers=headers)
    page = response.json()["data"]
    assert page["total"] == 2
    assert {item["priority"] for item in page["items"]} == {"low"}


def test_list_todos_clamps_page_size(client, headers):
    create(client, headers)
    page = client.get("/todos", params={"pageSize": 1000, "page": 0}, headers=headers).json()["data"]
    assert page["pageSize"] == 100
    assert page["page"] == 1


def test_update_todo(client, headers):
    todo = create(client, headers, dueDate="2030-01-01T09:00:00Z")
    response = client.patch(f"/todos/{todo['id']}", json={"status": "completed"}, headers=headers)
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["status"] == "completed"
    assert updated["title"] == todo["title"]
    assert updated["dueDate"] is not None

    response = client.patch(f"/todos/{todo['id']}", json={"dueDate": None}, headers=headers)
    assert response.json()["data"]["dueDate"] is None

    response = client.get("/todos", params={"status": "completed"}, headers=headers)
    assert response.json()["data"]["total"] == 1


def test_update_todo_rejects_null_for_required_fields(client, headers):
    todo = create(client, headers, title="Keep me", priority="high")
    for body in ({"title": None}, {"priority": None}, {"status": None}):
        response = client.patch(f"/todos/{todo['id']}", json=body, headers=headers)
        assert response.status_code == 400, body
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    current = client.get(f"/todos/{todo['id']}", headers=headers).json()["data"]
    assert (current["title"], current["priority"], current["status"]) == ("Keep me", "high", "pending")


def test_delete_todo(client, headers):
    todo = create(client, headers)
    response = client.delete(f"/todos/{todo['id']}", headers=headers)
    assert response.status_code == 204
    response = client.get(f"/todos/{todo['id']}", headers=headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_todos_are_scoped_to_owner(client, headers):
    todo = create(client, headers)
    bob = register(client, email="bob@example.com", name="Bob").json()["data"]
    bob_headers = auth_headers(bob["token"])

    assert client.get(f"/todos/{todo['id']}", headers=bob_headers).status_code == 404
    assert client.patch(f"/todos/{todo['id']}", json={"title": "mine"}, headers=bob_headers).status_code == 404
    assert client.delete(f"/todos/{todo['id']}", headers=bob_headers).status_code == 404
    assert client.get("/todos", headers=bob_headers).json()["data"]["total"] == 0


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/ready").json() == {"status": "ready"}
