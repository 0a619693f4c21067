"""API tests for extraction and task CRUD against a throwaway SQLite DB."""

import json
import uuid

import httpx
import pytest
from sqlalchemy.exc import SQLAlchemyError

from taskboard.core.dependencies import get_llm_client
from taskboard.main import app
from taskboard.repositories.task_repository import TaskRepository
from taskboard.services.llm_client import AnthropicClient, LLMAPIError, LLMConfigError
from tests.conftest import upstream_error

pytestmark = pytest.mark.db


DRAFTS = json.dumps(
    [
        {"title": "  Ship the v2 API ", "description": " by Friday ", "priority": "high", "assignee": None},
        {"title": "Write the docs", "description": "", "assignee": " John "},
    ]
)


def test_extract_creates_trimmed_defaulted_tasks(client, fake_llm):
    fake_llm.reply = f"```json\n{DRAFTS}\n```"

    response = client.post("/tasks/extract", json={"text": "Ship the v2 API by Friday, John will write the docs"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["count"] == len(body["tasks"]) == 2

    first, second = body["tasks"]
    assert first["title"] == "Ship the v2 API"
    assert first["description"] == "by Friday"
    assert first["priority"] == "high"
    assert first["status"] == "todo"
    assert first["assignee"] is None
    assert second["description"] is None
    assert second["priority"] == "medium"
    assert second["assignee"] == "John"
    assert {"id", "createdAt", "updatedAt"} <= set(first)

    # prompt embeds the input and the output budget is bounded
    assert fake_llm.calls[0]["prompt"].endswith("John will write the docs")
    assert fake_llm.calls[0]["max_tokens"] == 4096


def test_extracted_task_round_trips_through_get(client, seed_tasks):
    created = seed_tasks(DRAFTS)

    for task in created:
        fetched = client.get(f"/tasks/{task['id']}").json()
        for key in ("title", "priority", "status", "assignee"):
            assert fetched[key] == task[key]


def test_transcript_alias_is_accepted(client, fake_llm):
    fake_llm.reply = '[{"title": "a"}]'

    response = client.post("/tasks/extract", json={"transcript": "notes"})

    assert response.status_code == 200
    assert response.json()["count"] == 1


def test_extract_empty_array_is_a_valid_result(client, fake_llm):
    fake_llm.reply = "[]"

    response = client.post("/tasks/extract", json={"text": "nothing to do"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "tasks": [], "count": 0}


@pytest.mark.parametrize("payload", [{"text": ""}, {"text": "   "}, {"text": 42}, {}])
def test_extract_rejects_empty_or_non_text_input(client, fake_llm, payload):
    response = client.post("/tasks/extract", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "Input is required and must be a non-empty string"
    assert fake_llm.calls == []


def test_draft_without_title_fails_batch_before_any_write(client, fake_llm):
    fake_llm.reply = json.dumps([{"title": "fine"}, {"description": "no title here"}])

    response = client.post("/tasks/extract", json={"text": "notes"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Each task must have a valid title"
    assert "task 1" in body["details"]
    assert client.get("/tasks").json() == []


def test_malformed_reply(client, fake_llm):
    fake_llm.reply = "Sure! Here are the tasks you asked for."

    response = client.post("/tasks/extract", json={"text": "notes"})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to parse task extraction result"
    assert "details" in response.json()


def test_non_array_reply(client, fake_llm):
    fake_llm.reply = '{"tasks": []}'

    response = client.post("/tasks/extract", json={"text": "notes"})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to parse task extraction result"


def test_empty_reply(client, fake_llm):
    fake_llm.reply = "  "

    response = client.post("/tasks/extract", json={"text": "notes"})

    assert response.status_code == 500
    assert response.json() == {"error": "No response from LLM"}


def test_unknown_model_is_a_distinct_actionable_error(client, fake_llm):
    fake_llm.error = upstream_error(404, "model: nope")
    fake_llm.model = "nope"

    response = client.post("/tasks/extract", json={"text": "notes"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Model not found"
    assert '"nope"' in body["details"]
    assert "ANTHROPIC_MODEL" in body["details"]


def test_upstream_status_is_passed_through(client, fake_llm):
    fake_llm.error = upstream_error(529, "Overloaded")

    response = client.post("/tasks/extract", json={"text": "notes"})

    assert response.status_code == 529
    assert response.json() == {"error": "LLM API error", "details": "Overloaded"}


def test_unreachable_upstream_is_502(client, fake_llm):
    fake_llm.error = LLMAPIError("Could not reach anthropic: refused")

    response = client.post("/tasks/extract", json={"text": "notes"})

    assert response.status_code == 502


def test_non_json_upstream_success_is_502(client):
    gateway = AnthropicClient(
        api_key="sk-test",
        model="claude-test",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>gateway</html>")),
    )
    app.dependency_overrides[get_llm_client] = lambda: gateway

    response = client.post("/tasks/extract", json={"text": "notes"})

    assert response.status_code == 502
    assert response.json()["error"] == "LLM API error"


def test_non_error_upstream_status_is_not_passed_through(client, fake_llm):
    fake_llm.error = upstream_error(200, "odd reply")

    response = client.post("/tasks/extract", json={"text": "notes"})

    assert response.status_code == 502
    assert response.json() == {"error": "LLM API error", "details": "odd reply"}


def test_failed_insert_keeps_earlier_rows(client, fake_llm, monkeypatch):
    original_create = TaskRepository.create
    calls = []

    async def flaky_create(self, data):
        calls.append(data.title)
        if len(calls) == 2:
            raise SQLAlchemyError("disk I/O error")
        return await original_create(self, data)

    monkeypatch.setattr(TaskRepository, "create", flaky_create)
    fake_llm.reply = json.dumps([{"title": "first"}, {"title": "second"}, {"title": "third"}])

    response = client.post("/tasks/extract", json={"text": "notes"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to process input and generate tasks"
    assert "details" in body
    assert calls == ["first", "second"]
    assert [t["title"] for t in client.get("/tasks").json()] == ["first"]


def test_missing_credentials(client, fake_llm):
    fake_llm.error = LLMConfigError("ANTHROPIC_API_KEY is not set", missing=["ANTHROPIC_API_KEY"])

    response = client.post("/tasks/extract", json={"text": "notes"})

    assert response.status_code == 500
    assert "ANTHROPIC_API_KEY" in response.json()["details"]


def test_list_keeps_insertion_order(client, seed_tasks):
    seed_tasks(json.dumps([{"title": "one"}, {"title": "two"}]))
    seed_tasks(json.dumps([{"title": "three"}]))

    titles = [t["title"] for t in client.get("/tasks").json()]

    assert titles == ["one", "two", "three"]


def test_patch_applies_only_supplied_fields(client, seed_tasks):
    task = seed_tasks(json.dumps([{"title": "a", "description": "keep me", "assignee": "Ann"}]))[0]

    response = client.patch(f"/tasks/{task['id']}", json={"status": "in-progress", "priority": "low"})

    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == "in-progress"
    assert updated["priority"] == "low"
    assert updated["description"] == "keep me"
    assert updated["assignee"] == "Ann"
    assert updated["title"] == "a"
    assert updated["createdAt"] == task["createdAt"]


def test_patch_null_clears_optional_fields(client, seed_tasks):
    task = seed_tasks(json.dumps([{"title": "a", "description": "d", "assignee": "Ann"}]))[0]

    updated = client.patch(f"/tasks/{task['id']}", json={"description": None, "assignee": None}).json()

    assert updated["description"] is None
    assert updated["assignee"] is None


def test_empty_patch_leaves_task_unchanged(client, seed_tasks):
    task = seed_tasks(json.dumps([{"title": "a", "priority": "high"}]))[0]

    response = client.patch(f"/tasks/{task['id']}", json={})

    assert response.status_code == 200
    updated = response.json()
    for key in ("id", "title", "description", "status", "priority", "assignee", "createdAt"):
        assert updated[key] == task[key]
    assert updated["updatedAt"] >= task["updatedAt"]


def test_patch_ignores_system_managed_fields(client, seed_tasks):
    task = seed_tasks(json.dumps([{"title": "a"}]))[0]

    updated = client.patch(
        f"/tasks/{task['id']}",
        json={"id": str(uuid.uuid4()), "createdAt": "2000-01-01T00:00:00"},
    ).json()

    assert updated["id"] == task["id"]
    assert updated["createdAt"] == task["createdAt"]


@pytest.mark.parametrize(
    "payload",
    [
        {"title": ""},
        {"title": "   "},
        {"title": None},
        {"status": "blocked"},
        {"status": None},
        {"priority": "urgent"},
    ],
)
def test_patch_rejects_invalid_fields(client, seed_tasks, payload):
    task = seed_tasks(json.dumps([{"title": "a"}]))[0]

    response = client.patch(f"/tasks/{task['id']}", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"
    assert client.get(f"/tasks/{task['id']}").json()["title"] == "a"


@pytest.mark.parametrize("task_id", [str(uuid.uuid4()), "not-a-uuid"])
def test_patch_unknown_id_is_404(client, task_id):
    response = client.patch(f"/tasks/{task_id}", json={"status": "done"})

    assert response.status_code == 404
    assert response.json() == {"error": "Task not found"}


def test_delete_twice(client, seed_tasks):
    task = seed_tasks(json.dumps([{"title": "a"}]))[0]

    first = client.delete(f"/tasks/{task['id']}")
    second = client.delete(f"/tasks/{task['id']}")

    assert first.status_code == 200
    assert first.json() == {"success": True}
    assert second.status_code == 404
    assert second.json() == {"error": "Task not found"}
    assert client.get(f"/tasks/{task['id']}").status_code == 404


def test_health(client):
    body = client.get("/health").json()

    assert body["api_ok"] is True
    assert body["db_ok"] is True
