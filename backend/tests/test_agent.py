"""Tests for the agent chat route."""

import json

import pytest

import app.routers.agent as agent_module
from app.services.errors import UpstreamError


class FakeAgentClient:
    def __init__(self, reply="Hola, ¿en qué te ayudo?", session_id="sess-1", error=None):
        self.reply = reply
        self.session_id = session_id
        self.error = error
        self.calls = []

    async def chat(self, text, session_id=None):
        self.calls.append((text, session_id))
        if self.error:
            raise self.error
        return self.reply, self.session_id


@pytest.fixture
def fake_agent(monkeypatch):
    fake = FakeAgentClient()
    monkeypatch.setattr(agent_module, "agent_client", fake)
    return fake


@pytest.fixture
def conversation(client):
    return client.post("/api/conversations").json()


class TestAgentChat:

    def test_plain_reply(self, client, fake_agent, conversation):
        """A plain reply is returned for both UI and speech."""
        response = client.post(
            "/api/agentforce",
            json={"text": "Hola", "conversationId": conversation["id"]},
        )
        assert response.status_code == 200
        assert response.json() == {
            "text": "Hola, ¿en qué te ayudo?",
            "textForUi": "Hola, ¿en qué te ayudo?",
            "hasHtml": False,
            "conversationId": conversation["id"],
            "sessionId": "sess-1",
        }
        assert fake_agent.calls == [("Hola", None)]

    def test_new_session_id_is_persisted(self, client, fake_agent, conversation):
        """The session started for a new conversation is stored on it."""
        client.post("/api/agentforce", json={"text": "Hola", "conversationId": conversation["id"]})
        stored = client.get(f"/api/conversations/{conversation['id']}").json()
        assert stored["sessionId"] == "sess-1"

    def test_stored_session_is_forwarded_and_rotation_persisted(self, client, fake_agent):
        """The stored session is reused and a rotated one is saved."""
        conv = client.post("/api/conversations", json={"sessionId": "old-sess"}).json()
        fake_agent.session_id = "new-sess"

        response = client.post("/api/agentforce", json={"text": "Otra vez", "conversationId": conv["id"]})

        assert fake_agent.calls == [("Otra vez", "old-sess")]
        assert response.json()["sessionId"] == "new-sess"
        stored = client.get(f"/api/conversations/{conv['id']}").json()
        assert stored["sessionId"] == "new-sess"

    def test_structured_reply_is_split(self, client, fake_agent, conversation):
        """A structured reply yields separate UI and speech text."""
        fake_agent.reply = json.dumps({
            "message": "Estos son tus pedidos:",
            "data": [{"value": {"promptResponse": "<ul><li>Pedido 1</li><li>Pedido 2</li></ul>"}}],
        })
        body = client.post(
            "/api/agentforce",
            json={"text": "pedidos", "conversationId": conversation["id"]},
        ).json()

        assert body["hasHtml"] is True
        assert body["textForUi"].startswith("<p>Estos son tus pedidos:</p>\n<ul>")
        assert "<" not in body["text"]
        assert "• Pedido 1" in body["text"]

    @pytest.mark.parametrize("reply", ["", "   ", None, {"message": "x"}, 42])
    def test_invalid_reply_is_500_and_not_persisted(self, client, fake_agent, conversation, reply):
        """Empty or non-text replies are a 500 and the session is not saved."""
        fake_agent.reply = reply
        response = client.post(
            "/api/agentforce",
            json={"text": "Hola", "conversationId": conversation["id"]},
        )
        assert response.status_code == 500
        assert response.json()["error"] == "Agent response invalid"
        stored = client.get(f"/api/conversations/{conversation['id']}").json()
        assert stored["sessionId"] is None

    def test_missing_text_is_400(self, client, fake_agent, conversation):
        """A message without text is a 400."""
        response = client.post("/api/agentforce", json={"conversationId": conversation["id"]})
        assert response.status_code == 400
        assert response.json() == {"error": "Text is required"}
        assert fake_agent.calls == []

    def test_missing_conversation_id_is_400(self, client, fake_agent):
        """A message without a conversation id is a 400."""
        response = client.post("/api/agentforce", json={"text": "Hola"})
        assert response.status_code == 400
        assert response.json() == {"error": "ConversationId is required"}

    def test_unknown_conversation_is_404(self, client, fake_agent):
        """An unknown conversation id is a 404."""
        response = client.post("/api/agentforce", json={"text": "Hola", "conversationId": "nope"})
        assert response.status_code == 404
        assert fake_agent.calls == []

    def test_vendor_rate_limit_is_classified(self, client, fake_agent, conversation):
        """A vendor 429 maps to the rate limit message."""
        fake_agent.error = UpstreamError("Agent API error 429: too many requests", status_code=429)
        response = client.post(
            "/api/agentforce",
            json={"text": "Hola", "conversationId": conversation["id"]},
        )
        assert response.status_code == 500
        assert response.json()["error"] == "Service temporarily busy. Please wait a moment and try again."
