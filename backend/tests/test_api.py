"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient
from helpers import DummyChain, DummySettings, make_service
from query_assistant.api import create_app


@pytest.fixture
def chains() -> dict[str, DummyChain]:
    return {
        "suggest": DummyChain("1. Foo\n2. Bar\n\n3. Baz"),
        "answer": DummyChain("The answer."),
    }


@pytest.fixture
def client(chains):
    # A long debounce keeps background suggestion refreshes out of the way.
    settings = DummySettings(debounce_seconds=60)
    service = make_service(chains["suggest"], chains["answer"], settings=settings)
    with TestClient(create_app(settings=settings, service=service)) as test_client:
        yield test_client


def test_index_page_renders(client) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert "AI Query Assistant" in response.text
    assert "const DEBOUNCE_MS = 60000;" in response.text


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_suggestion_proxy(client, chains) -> None:
    response = client.post("/api/suggestions", json={"query": "bread recipes"})

    assert response.status_code == 200
    assert response.json() == {"suggestions": ["Foo", "Bar", "Baz"]}
    assert chains["suggest"].calls == [{"query": "bread recipes"}]


def test_suggestion_proxy_skips_short_queries(client, chains) -> None:
    response = client.post("/api/suggestions", json={"query": " ab "})

    assert response.json() == {"suggestions": []}
    assert chains["suggest"].calls == []


def test_answer_proxy(client, chains) -> None:
    response = client.post("/api/answer", json={"query": "What is bread?"})

    assert response.json() == {"answer": "The answer."}
    assert chains["answer"].calls == [{"query": "What is bread?"}]


def test_proxy_failure_maps_to_bad_gateway() -> None:
    settings = DummySettings()
    service = make_service(answer_chain=DummyChain(TimeoutError("slow")), settings=settings)
    with TestClient(create_app(settings=settings, service=service)) as failing:
        response = failing.post("/api/answer", json={"query": "What is bread?"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Unable to process query"


def test_session_lifecycle(client, chains) -> None:
    created = client.post("/api/sessions")
    assert created.status_code == 201
    session_id = created.json()["session_id"]
    assert created.json()["state"]["status"] == {"suggest": "idle", "answer": "idle"}

    state = client.put(f"/api/sessions/{session_id}/query", json={"query": "ab"}).json()
    assert state["suggestions"] == []
    assert state["is_loading"] is False

    state = client.put(
        f"/api/sessions/{session_id}/query", json={"query": "explain sourdough"}
    ).json()
    assert state["query"] == "explain sourdough"
    assert state["query_html"] == (
        '<span class="keyword">explain</span><span> </span>'
        '<span class="keyword">sourdough</span>'
    )

    state = client.post(f"/api/sessions/{session_id}/process").json()
    assert state["final_answer"] == "The answer."
    assert state["status"]["answer"] == "succeeded"
    assert chains["answer"].calls == [{"query": "explain sourdough"}]

    assert client.delete(f"/api/sessions/{session_id}").status_code == 204
    assert client.get(f"/api/sessions/{session_id}").status_code == 404


def test_session_selection(client, chains) -> None:
    session_id = client.post("/api/sessions").json()["session_id"]
    client.app.state.sessions.get(session_id).suggestions = ["What is sourdough", "Bread recipes"]

    state = client.get(f"/api/sessions/{session_id}").json()
    assert state["suggestions_html"][1] == (
        '<span class="keyword">Bread</span><span> </span>'
        '<span class="keyword">recipes</span>'
    )

    bad = client.post(f"/api/sessions/{session_id}/select", json={"index": 5})
    assert bad.status_code == 422

    state = client.post(f"/api/sessions/{session_id}/select", json={"index": 1}).json()
    assert state["selected_index"] == 1
    assert state["query"] == "Bread recipes"

    client.post(f"/api/sessions/{session_id}/process")
    assert chains["answer"].calls == [{"query": "Bread recipes"}]


def test_unknown_session_is_not_found(client) -> None:
    assert client.get("/api/sessions/missing").status_code == 404
    assert client.post("/api/sessions/missing/process").status_code == 404


def test_process_uses_the_query_on_screen(client, chains) -> None:
    session_id = client.post("/api/sessions").json()["session_id"]
    # An earlier keystroke that reached the server last.
    client.put(f"/api/sessions/{session_id}/query", json={"query": "how do I bake"})

    state = client.post(
        f"/api/sessions/{session_id}/process", json={"query": "how do I bake bread"}
    ).json()

    assert state["query"] == "how do I bake bread"
    assert chains["answer"].calls == [{"query": "how do I bake bread"}]


def test_process_with_on_screen_selection_keeps_the_suggestion(client, chains) -> None:
    session_id = client.post("/api/sessions").json()["session_id"]
    client.app.state.sessions.get(session_id).suggestions = ["What is sourdough", "Bread recipes"]
    client.post(f"/api/sessions/{session_id}/select", json={"index": 0})

    state = client.post(
        f"/api/sessions/{session_id}/process", json={"query": "What is sourdough"}
    ).json()

    assert state["selected_index"] == 0
    assert chains["answer"].calls == [{"query": "What is sourdough"}]


def test_session_count_is_capped() -> None:
    settings = DummySettings(debounce_seconds=60, max_sessions=20)
    app = create_app(settings=settings, service=make_service(settings=settings))
    with TestClient(app) as capped:
        for _ in range(200):
            assert capped.post("/api/sessions").status_code == 201

        assert len(capped.app.state.sessions) == 20


def test_page_keeps_button_disabled_until_the_answer_arrives(client) -> None:
    page = client.get("/").text
    process = page[page.index("async function processQuery"):page.index("async function start")]

    assert "processing = true;" in process
    assert process.index('send("POST", "/process"') < process.index("poll();")
    assert "$(\"process\").disabled = state.is_loading || processing;" in page


def test_page_orders_updates_and_releases_its_session(client) -> None:
    page = client.get("/").text

    assert 'send("PUT", "/query"' in page
    assert "queue.then(() => call(method, path, body))" in page
    assert 'if (state.query !== $("query").value) return;' in page
    assert 'addEventListener("pagehide"' in page
    assert 'method: "DELETE", keepalive: true' in page
