"""Integration tests for question generation endpoints."""

import time
import uuid
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from backend.app.config import Settings
from backend.app.db.inmemory import InMemoryDocumentRepository, InMemoryDraftRepository
from backend.app.errors import GenerationError
from backend.app.main import create_app
from tests.fakes import RecordingSleep, ScriptedCompletionClient, make_question

SOP_TREE = [
    {
        "name": "Fire Safety",
        "content": "Use the class K extinguisher on grease fires in the kitchen.",
        "children": [
            {
                "name": "Evacuation",
                "content": "Leave through the rear exit and meet in the car park.",
                "children": [],
            }
        ],
    },
    {
        "name": "Spills",
        "content": "Place a wet floor sign before cleaning any spill.",
        "children": [],
    },
]

MENU = {
    "name": "Dinner",
    "categories": [
        {
            "domain": "menu",
            "label": "Starters",
            "items": [{"name": "Bruschetta", "ingredients": ["bread", "tomato"]}],
        },
        {
            "domain": "menu",
            "label": "Mains",
            "items": [{"name": "Ribeye", "ingredients": ["beef"], "allergens": ["dairy"]}],
        },
    ],
}


class Responder:
    """Categorizes raw text, generates questions for JSON payloads."""

    def __init__(self) -> None:
        self.failing_sections: set[str] = set()

    def __call__(self, payload: Any) -> Any:
        if isinstance(payload, str):
            return SOP_TREE
        label = payload.get("sopCategoryName") or payload.get("categoryName")
        if label in self.failing_sections:
            return GenerationError("timeout", "AI request timed out")
        return [make_question(f"Question about {label}")]


@pytest.fixture
def responder() -> Responder:
    return Responder()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def client(tmp_path: Path, responder: Responder, sleep: RecordingSleep) -> Iterator[TestClient]:
    app = create_app(
        Settings(upload_dir=str(tmp_path / "uploads"), generation_batch_size=1),
        documents=InMemoryDocumentRepository(),
        drafts=InMemoryDraftRepository(),
        llm_client=ScriptedCompletionClient(responder),
        sleep_fn=sleep,
    )
    with TestClient(app) as test_client:
        yield test_client


def _processed_document(client: TestClient) -> tuple[str, dict[str, str]]:
    response = client.post(
        "/documents",
        files={"file": ("sop.txt", b"Fire safety and spills.", "text/plain")},
        data={"title": "Kitchen SOP"},
    )
    document_id = response.json()["document_id"]
    for _ in range(100):
        if client.get(f"/documents/{document_id}/status").json()["status"] == "processed":
            break
        time.sleep(0.02)
    categories = client.get(f"/documents/{document_id}").json()["categories"]
    ids = {
        "Fire Safety": categories[0]["id"],
        "Evacuation": categories[0]["children"][0]["id"],
        "Spills": categories[1]["id"],
    }
    return document_id, ids


def test_generate_for_document_sections(client: TestClient, sleep: RecordingSleep) -> None:
    document_id, ids = _processed_document(client)

    response = client.post(
        f"/documents/{document_id}/questions",
        json={"category_ids": [ids["Evacuation"], ids["Spills"]], "difficulty": "hard"},
    )

    assert response.status_code == 200
    report = response.json()
    assert report["tasks"] == 2
    assert report["persisted"] == 2
    assert {d["category_node_id"] for d in report["drafts"]} == {ids["Evacuation"], ids["Spills"]}
    assert all(d["status"] == "pending_review" for d in report["drafts"])
    assert all(d["difficulty"] == "hard" for d in report["drafts"])
    # batch size 1 means one pause between the two tasks
    assert len(sleep.calls) == 1

    doc = client.get(f"/documents/{document_id}").json()
    assert doc["question_generation_status"] == "completed"
    assert doc["question_count"] == 2

    drafts = client.get("/questions/drafts", params={"document_id": document_id}).json()["drafts"]
    assert len(drafts) == 2


def test_partial_failure_still_succeeds(client: TestClient, responder: Responder) -> None:
    document_id, ids = _processed_document(client)
    responder.failing_sections.add("Spills")

    response = client.post(
        f"/documents/{document_id}/questions",
        json={"category_ids": [ids["Fire Safety"], ids["Spills"]]},
    )

    assert response.status_code == 200
    assert response.json()["failed_tasks"] == 1
    assert response.json()["persisted"] == 1


def test_all_sections_failing_is_502(client: TestClient, responder: Responder) -> None:
    document_id, ids = _processed_document(client)
    responder.failing_sections.add("Spills")

    response = client.post(
        f"/documents/{document_id}/questions", json={"category_ids": [ids["Spills"]]}
    )

    assert response.status_code == 502
    assert response.json() == {
        "detail": "AI did not produce any valid questions for the selected content",
        "error": "generation_error",
        "reason": "timeout",
    }
    doc = client.get(f"/documents/{document_id}").json()
    assert doc["question_generation_status"] == "failed"


def test_unknown_category_is_404(client: TestClient) -> None:
    document_id, _ = _processed_document(client)

    response = client.post(
        f"/documents/{document_id}/questions", json={"category_ids": ["missing"]}
    )

    assert response.status_code == 404


def test_empty_category_list_is_422(client: TestClient) -> None:
    response = client.post(f"/documents/{uuid.uuid4()}/questions", json={"category_ids": []})

    assert response.status_code == 422


def test_generate_for_menu(client: TestClient) -> None:
    response = client.post(
        "/questions/menu",
        json={"catalog": MENU, "categories": ["starters"], "questions_per_category": 2},
    )

    assert response.status_code == 200
    report = response.json()
    assert report["document_id"] is None
    assert report["tasks"] == 1
    assert [d["category"] for d in report["drafts"]] == ["Starters"]
    assert report["drafts"][0]["source"] == "menu"


def test_menu_without_items_is_422(client: TestClient) -> None:
    catalog = {"name": "Empty", "categories": [{"domain": "menu", "label": "Specials"}]}

    response = client.post("/questions/menu", json={"catalog": catalog})

    assert response.status_code == 422


def test_drafts_are_tenant_scoped(client: TestClient) -> None:
    client.post("/questions/menu", json={"catalog": MENU})
    other = {"Authorization": f"Bearer {uuid.uuid4()}:{uuid.uuid4()}"}

    assert len(client.get("/questions/drafts").json()["drafts"]) == 2
    assert client.get("/questions/drafts", headers=other).json()["drafts"] == []
