import pytest
from fastapi.testclient import TestClient

from campaign_assistant import CampaignAssistant, CampaignGenerator, ConversationSession, PersonalizationService
from campaign_assistant.api import services
from campaign_assistant.api.websocket_handler import manager
from campaign_assistant.store import InMemoryCampaignStore
from campaign_assistant.tokens import PERSONALIZATION_END, PERSONALIZATION_START
from server import app

HANDSHAKE = {
    "type": "handshake",
    "company_name": "Mercy Health",
    "recruiter_name": "Alex Rivera",
    "recent_searches": ["RN Denver"],
    "collateral": [{"type": "who_we_are", "content": "Mercy Health is a network of community hospitals."}],
    "user_id": "user-1",
    "project_id": "project-1",
}


@pytest.fixture
def client(monkeypatch, failing_llm):
    store = InMemoryCampaignStore()
    monkeypatch.setattr(services, "assistant", CampaignAssistant(failing_llm))
    monkeypatch.setattr(services, "generator", CampaignGenerator(failing_llm))
    monkeypatch.setattr(services, "personalizer", PersonalizationService(failing_llm))
    monkeypatch.setattr(services, "store", store)
    with TestClient(app) as test_client:
        test_client.store = store
        yield test_client


def _handshake(websocket):
    websocket.receive_json()
    websocket.send_json(HANDSHAKE)
    # A reset reply means the handshake before it has been handled
    websocket.send_json({"type": "reset"})
    websocket.receive_json()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["status"] == "running"


def test_welcome_message(client):
    with client.websocket_connect("/ws/client-welcome") as websocket:
        welcome = websocket.receive_json()

    assert welcome["type"] == "assistant"
    assert welcome["next_step"] == "goal"
    assert welcome["suggestions"]


def test_user_message_runs_a_turn(client):
    with client.websocket_connect("/ws/client-turn") as websocket:
        _handshake(websocket)
        websocket.send_json({"type": "user_message", "message": "Build a talent community for ICU nurses"})

        echo = websocket.receive_json()
        reply = websocket.receive_json()

    assert echo == {"type": "user", "message": "Build a talent community for ICU nurses", "timestamp": echo["timestamp"]}
    assert reply["type"] == "assistant"
    assert reply["next_step"] == "audience"
    assert reply["suggestions"] == ['Candidates matching: "RN Denver"']
    assert reply["draft"]["matchedExampleId"] == "talent-community-building"
    assert reply["draft"]["companyName"] == "Mercy Health"


def test_confirmed_review_generates_campaign(client, failing_llm, review_draft):
    with client.websocket_connect("/ws/client-generate") as websocket:
        _handshake(websocket)
        session = ConversationSession(services.assistant)
        session.draft = review_draft
        manager.set_session("client-generate", session)

        websocket.send_json({"type": "user_message", "message": "Yes, generate the campaign"})
        messages = [websocket.receive_json() for _ in range(4)]

    assert [message["type"] for message in messages] == ["user", "assistant", "status", "campaign"]
    assert messages[1]["next_step"] == "generate"
    campaign = messages[3]
    assert campaign["campaign_data"]["type"] == "nurture"
    assert len(campaign["email_steps"]) == 4
    assert campaign["email_steps"][0]["delayUnit"] == "immediately"
    assert "network of community hospitals" in campaign["email_steps"][0]["content"]


def test_save_campaign_reports_validation_errors(client):
    with client.websocket_connect("/ws/client-save") as websocket:
        _handshake(websocket)
        websocket.send_json({
            "type": "save_campaign",
            "campaign_data": {"name": "ICU Talent", "type": "nurture", "campaignGoal": "Build a talent community"},
            "email_steps": [{"id": "step-1", "subject": "Hi", "content": "<p>Hello</p>", "delayUnit": "immediately"}],
        })
        result = websocket.receive_json()

    assert result["type"] == "save_result"
    assert result["success"] is False
    assert result["validation_errors"] == ["Target audience is required"]
    assert client.store.campaigns == {}


def test_save_campaign_persists(client):
    with client.websocket_connect("/ws/client-save-ok") as websocket:
        _handshake(websocket)
        websocket.send_json({
            "type": "save_campaign",
            "campaign_data": {
                "name": "ICU Talent",
                "type": "nurture",
                "targetAudience": "ICU nurses",
                "campaignGoal": "Build a talent community",
            },
            "email_steps": [{"id": "step-1", "subject": "Hi", "content": "<p>Hello</p>", "delayUnit": "immediately"}],
        })
        result = websocket.receive_json()

    assert result["success"] is True
    saved = client.store.campaigns[result["data"]["id"]]
    assert saved["user_id"] == "user-1"
    assert saved["steps"][0]["step_order"] == 1


PREVIEW_STEP = {
    "type": "preview_step",
    "step_id": "step-1",
    "subject": "{{First Name}}, welcome to {{Company Name}}",
    "content": (
        "<p>Hi {{First Name}},</p>"
        f"{PERSONALIZATION_START}<p>Generic paragraph</p>{PERSONALIZATION_END}"
        "<p>Best, {{Recruiter Name}}</p>"
    ),
    "candidate": {"name": "Jordan Smith", "company": "Mercy General", "skills": ["ICU care"]},
}


def test_preview_step_personalizes_for_candidate(client, monkeypatch, scripted_llm):
    llm = scripted_llm("<p>Your ICU care at Mercy General stands out.</p>")
    monkeypatch.setattr(services, "personalizer", PersonalizationService(llm))

    with client.websocket_connect("/ws/client-preview") as websocket:
        _handshake(websocket)
        websocket.send_json(PREVIEW_STEP)
        preview = websocket.receive_json()

    assert preview["type"] == "preview"
    assert preview["step_id"] == "step-1"
    assert preview["subject"] == "Jordan, welcome to Mercy Health"
    assert "Your ICU care at Mercy General stands out." in preview["content"]
    assert "Generic paragraph" not in preview["content"]
    assert preview["content"].endswith("<p>Best, Alex Rivera</p>")


def test_preview_step_falls_back_to_tokens(client):
    with client.websocket_connect("/ws/client-preview-fallback") as websocket:
        _handshake(websocket)
        websocket.send_json(PREVIEW_STEP)
        preview = websocket.receive_json()

    assert preview["content"].startswith("<p>Hi Jordan,</p>")
    assert "Generic paragraph" in preview["content"]


def test_preview_step_rejects_invalid_candidate(client):
    with client.websocket_connect("/ws/client-preview-invalid") as websocket:
        _handshake(websocket)
        websocket.send_json({**PREVIEW_STEP, "candidate": {"company": "Mercy General"}})
        reply = websocket.receive_json()

    assert reply["type"] == "error"
    assert reply["message"].startswith("Invalid preview candidate")


def test_reset_clears_session_after_turn(client):
    with client.websocket_connect("/ws/client-reset") as websocket:
        _handshake(websocket)
        websocket.send_json({"type": "user_message", "message": "Build a talent community for ICU nurses"})
        websocket.receive_json()
        websocket.receive_json()

        websocket.send_json({"type": "reset"})
        reply = websocket.receive_json()
        session = manager.get_session("client-reset")

    assert reply["next_step"] == "goal"
    assert session.draft.goal is None
    assert session.draft.company_name == "Mercy Health"
