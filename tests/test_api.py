from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from ssage.app import create_app
from ssage.config import Configuration, Settings
from ssage.observability import MetricsRecorder
from ssage.sessions import ConversationRegistry


@pytest.fixture()
def client() -> TestClient:
    settings = Settings(observability_metrics_enabled=False)
    app = create_app(settings=settings)
    return TestClient(app)


def test_feed_and_summary_roundtrip(client: TestClient) -> None:
    response = client.post("/conversations/chat-1/messages", json={"message": "hi! how are you mate?"})
    assert response.status_code == 200
    assert response.json() == {"conversation_id": "chat-1", "keywords": "mate"}

    client.post("/conversations/chat-1/messages", json={"message": "this is just a sample message."})
    response = client.post("/conversations/chat-1/messages", json={"message": "are you there mate?"})
    assert response.json()["keywords"] == "mate there"

    summary = client.get("/conversations/chat-1/keywords")
    assert summary.status_code == 200
    payload = summary.json()
    assert payload["keywords"].split()[0] == "mate"
    assert payload["ranked"][0] == {"word": "mate", "weight": 2}


def test_feed_requires_message(client: TestClient) -> None:
    assert client.post("/conversations/chat/messages", json={}).status_code == 400
    assert client.post("/conversations/chat/messages", json={"message": 42}).status_code == 400
    assert client.post("/conversations/chat/messages", content=b"not json").status_code == 400


def test_unknown_conversation_returns_404(client: TestClient) -> None:
    assert client.get("/conversations/ghost/keywords").status_code == 404
    assert client.post("/conversations/ghost/keywords/word/prioritize").status_code == 404
    assert client.delete("/conversations/ghost").status_code == 404


def test_prioritize_and_trivialize(client: TestClient) -> None:
    client.post(
        "/conversations/chat/messages",
        json={"message": "hi! this is just a sample message with distinct words."},
    )

    response = client.post("/conversations/chat/keywords/Message/prioritize")
    assert response.status_code == 200
    assert response.json() == {"conversation_id": "chat", "word": "Message", "updated": True, "weight": 2}

    feed = client.post("/conversations/chat/messages", json={"message": "just a message"})
    assert feed.json()["keywords"] == "message just"

    response = client.post("/conversations/chat/keywords/message/trivialize")
    assert response.json()["weight"] == 2

    missing = client.post("/conversations/chat/keywords/nonexistent/trivialize")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Keyword not found"


def test_reset_conversation(client: TestClient) -> None:
    client.post("/conversations/chat/messages", json={"message": "remember these words"})

    assert client.get("/health").json() == {"status": "ok", "conversations": 1}
    response = client.delete("/conversations/chat")
    assert response.status_code == 200
    assert response.json() == {"conversation_id": "chat", "reset": True}
    assert client.get("/conversations/chat/keywords").status_code == 404
    assert client.get("/health").json()["conversations"] == 0


def test_custom_registry_is_used() -> None:
    registry = ConversationRegistry(Configuration(take_words_max=1, take_words_min=1, min_word_length=1))
    app = create_app(settings=Settings(observability_metrics_enabled=False), registry=registry)
    client = TestClient(app)

    assert app.state.services.registry is registry

    client.post("/conversations/c/messages", json={"message": "one two three"})

    assert client.get("/conversations/c/keywords").json()["keywords"] == "one"
    assert registry.conversation_ids() == ["c"]


def test_metrics_endpoint_disabled_by_default(client: TestClient) -> None:
    assert client.get("/metrics").status_code == 404


def test_metrics_endpoint_exports_prometheus() -> None:
    metrics = MetricsRecorder(enabled=True, namespace="ssage_api", prometheus_enabled=True)
    app = create_app(settings=Settings(), metrics=metrics)
    client = TestClient(app)

    client.post("/conversations/chat/messages", json={"message": "count these words"})
    response = client.get("/metrics")

    assert response.status_code == 200
    body = response.text
    assert "ssage_api_engine_messages_total 1.0" in body
    assert 'ssage_api_engine_keywords{conversation="chat"} 3.0' in body


def test_empty_custom_metrics_recorder_is_kept() -> None:
    metrics = MetricsRecorder(enabled=True, namespace="ssage_kept", prometheus_enabled=True)
    registry = ConversationRegistry(metrics=metrics)
    app = create_app(settings=Settings(observability_metrics_enabled=False), registry=registry, metrics=metrics)

    assert app.state.services.metrics is metrics
    assert app.state.services.registry is registry
