import asyncio
import json

import httpx
import pytest
from pydantic import ValidationError

from campaign_assistant import StepEditor
from campaign_assistant.editor import (
    FOLLOW_UP_DELAY,
    HTML_BLOCKS,
    build_campaign_record,
    save_campaign,
    serialize_steps,
    validate_campaign,
)
from campaign_assistant.models import CampaignData, CampaignType, Candidate, DelayUnit, EmailStep, Tone
from campaign_assistant.store import HttpCampaignStore, InMemoryCampaignStore
from campaign_assistant.tokens import count_personalization_sections


class RecordingStore:
    def __init__(self, result=None):
        self.calls = []
        self.result = result or {"data": {"id": "campaign-1"}, "error": None}

    async def create_campaign(self, record, steps):
        self.calls.append(("create", record, steps))
        return self.result

    async def update_campaign(self, campaign_id, record, steps):
        self.calls.append(("update", campaign_id, record, steps))
        return self.result


@pytest.fixture
def campaign_data():
    return CampaignData(
        name="  ICU Talent Community ",
        type=CampaignType.NURTURE,
        target_audience="ICU nurses in Denver",
        campaign_goal="Build a talent community",
        tone=Tone.FRIENDLY,
        company_name="Mercy Health",
        recruiter_name="Alex Rivera",
        content_sources=["who_we_are", "benefits"],
        ai_instructions="  Mention the new campus  ",
        enable_personalization=True,
    )


@pytest.fixture
def steps():
    return [
        EmailStep(id="step-1", subject="Hi {{First Name}}", content="<p>Welcome to {{Company Name}}</p>",
                  delay=0, delay_unit=DelayUnit.IMMEDIATELY),
        EmailStep(id="step-2", subject="Meet the team", content="<p>Our people</p>", delay=2),
        EmailStep(id="step-3", subject="Stay in touch", content="<p>Bye for now</p>", delay=4),
    ]


def test_missing_audience_blocks_store_call(campaign_data, steps):
    store = RecordingStore()
    data = campaign_data.model_copy(update={"target_audience": "   "})

    outcome = asyncio.run(save_campaign(store, data, steps, "user-1", "project-1"))

    assert not outcome.ok
    assert outcome.validation_errors == ["Target audience is required"]
    assert outcome.error == "Please fix the following issues: Target audience is required"
    assert store.calls == []


def test_all_validation_errors_reported_in_order():
    errors = validate_campaign(CampaignData(), [], None, None)

    assert errors == [
        "Campaign name is required",
        "Campaign type is required",
        "Target audience is required",
        "Campaign goal is required",
        "At least one email step is required",
        "User authentication required",
        "Project selection required",
    ]


def test_step_errors_for_raw_steps(campaign_data):
    raw_steps = [
        {"id": "step-1", "subject": " ", "content": "<p>x</p>", "delayUnit": "immediately"},
        {"id": "step-2", "subject": "Next", "content": "", "delayUnit": "weeks"},
    ]

    errors = validate_campaign(campaign_data, raw_steps, "user-1", "project-1")

    assert errors == [
        "Email step 1: Subject is required",
        "Email step 2: Content is required",
        "Email step 2: Invalid delay unit (must be 'immediately' or 'business days')",
    ]


def test_save_creates_record_and_steps(campaign_data, steps):
    store = RecordingStore()

    outcome = asyncio.run(save_campaign(store, campaign_data, steps, "user-1", "project-1"))

    assert outcome.ok
    assert outcome.data == {"id": "campaign-1"}
    kind, record, saved_steps = store.calls[0]
    assert kind == "create"
    assert record["name"] == "ICU Talent Community"
    assert record["type"] == "nurture"
    assert record["status"] == "draft"
    assert record["ai_instructions"] == "Mention the new campus"
    assert record["settings"] == {"enablePersonalization": True}
    assert record["stats"] == {"sent": 0, "opened": 0, "replied": 0}
    assert [step["step_order"] for step in saved_steps] == [1, 2, 3]
    assert saved_steps[1] == {
        "step_order": 2,
        "type": "email",
        "subject": "Meet the team",
        "content": "<p>Our people</p>",
        "delay": 2,
        "delay_unit": "business days",
    }


def test_save_with_campaign_id_updates(campaign_data, steps):
    store = RecordingStore()

    asyncio.run(save_campaign(store, campaign_data, steps, "user-1", "project-1", campaign_id="campaign-9"))

    assert store.calls[0][0] == "update"
    assert store.calls[0][1] == "campaign-9"


def test_store_error_is_reported(campaign_data, steps):
    store = RecordingStore(result={"data": None, "error": "connection refused"})

    outcome = asyncio.run(save_campaign(store, campaign_data, steps, "user-1", "project-1"))

    assert outcome.error == "Failed to save campaign: connection refused"
    assert outcome.validation_errors == []


def test_ai_instructions_blank_becomes_none(campaign_data):
    record = build_campaign_record(campaign_data.model_copy(update={"ai_instructions": "   "}), "u", "p")

    assert record["ai_instructions"] is None


def test_serialize_steps_repairs_raw_values():
    serialized = serialize_steps([
        {"subject": "A", "content": "x", "delay": "-4", "delayUnit": "weeks"},
        {"subject": "B", "content": "y", "delay": "later", "delay_unit": "bogus"},
    ])

    assert serialized[0]["delay"] == 0
    assert serialized[0]["delay_unit"] == "immediately"
    assert serialized[1]["delay"] == 0
    assert serialized[1]["delay_unit"] == "business days"


def test_in_memory_store_round_trip(campaign_data, steps):
    store = InMemoryCampaignStore()
    editor = StepEditor(campaign_data, steps)

    created = asyncio.run(editor.save(store, "user-1", "project-1"))
    campaign_id = created.data["id"]
    store.campaigns[campaign_id]["stats"]["sent"] = 12

    editor.remove_step("step-3")
    updated = asyncio.run(editor.save(store, "user-1", "project-1", campaign_id=campaign_id))

    assert updated.ok
    assert len(store.campaigns[campaign_id]["steps"]) == 2
    assert store.campaigns[campaign_id]["stats"]["sent"] == 12


def test_in_memory_store_unknown_campaign(campaign_data, steps):
    outcome = asyncio.run(
        save_campaign(InMemoryCampaignStore(), campaign_data, steps, "user-1", "project-1", campaign_id="missing")
    )

    assert outcome.error == "Failed to save campaign: Campaign missing not found"


def test_http_store_posts_campaign(campaign_data, steps):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(201, json={"data": {"id": "remote-1"}})

    store = HttpCampaignStore("https://store.example.org/v1/", api_key="secret", transport=httpx.MockTransport(handler))
    outcome = asyncio.run(save_campaign(store, campaign_data, steps, "user-1", "project-1"))

    assert outcome.data == {"id": "remote-1"}
    assert requests[0].method == "POST"
    assert str(requests[0].url) == "https://store.example.org/v1/campaigns"
    assert requests[0].headers["authorization"] == "Bearer secret"
    body = json.loads(requests[0].content)
    assert body["campaign"]["name"] == "ICU Talent Community"
    assert len(body["steps"]) == 3


def test_http_store_error_does_not_raise(campaign_data, steps):
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    store = HttpCampaignStore("https://store.example.org/v1", transport=transport)

    outcome = asyncio.run(save_campaign(store, campaign_data, steps, "user-1", "project-1", campaign_id="c-1"))

    assert outcome.error == "Failed to save campaign: HTTP error 500: boom"


def test_editor_enforces_schedule_on_load(campaign_data):
    editor = StepEditor(campaign_data, [
        EmailStep(id="a", subject="A", content="x", delay=5, delay_unit=DelayUnit.BUSINESS_DAYS),
        EmailStep(id="b", subject="B", content="y", delay=0, delay_unit=DelayUnit.IMMEDIATELY),
    ])

    assert (editor.steps[0].delay, editor.steps[0].delay_unit) == (0, DelayUnit.IMMEDIATELY)
    assert (editor.steps[1].delay, editor.steps[1].delay_unit) == (FOLLOW_UP_DELAY, DelayUnit.BUSINESS_DAYS)
    assert editor.active_step_id == "a"


def test_add_step(campaign_data, steps):
    editor = StepEditor(campaign_data, steps)

    step = editor.add_step()

    assert step.id == "step-4"
    assert (step.delay, step.delay_unit) == (FOLLOW_UP_DELAY, DelayUnit.BUSINESS_DAYS)
    assert editor.active_step_id == "step-4"


def test_first_added_step_is_immediate(campaign_data):
    step = StepEditor(campaign_data).add_step()

    assert (step.delay, step.delay_unit) == (0, DelayUnit.IMMEDIATELY)


def test_duplicate_step_inserted_after_source(campaign_data, steps):
    editor = StepEditor(campaign_data, steps)

    copy = editor.duplicate_step("step-1")

    assert [step.id for step in editor.steps][:2] == ["step-1", copy.id]
    assert copy.subject == "Hi {{First Name}} (Copy)"
    assert (copy.delay, copy.delay_unit) == (FOLLOW_UP_DELAY, DelayUnit.BUSINESS_DAYS)
    assert editor.active_step_id == copy.id


def test_remove_first_step_promotes_next(campaign_data, steps):
    editor = StepEditor(campaign_data, steps)

    editor.remove_step("step-1")

    assert editor.steps[0].id == "step-2"
    assert (editor.steps[0].delay, editor.steps[0].delay_unit) == (0, DelayUnit.IMMEDIATELY)
    assert editor.active_step_id == "step-2"


def test_remove_last_step(campaign_data, steps):
    editor = StepEditor(campaign_data, steps[:1])

    editor.remove_step("step-1")

    assert editor.steps == []
    assert editor.active_step_id is None


def test_move_step_reapplies_schedule(campaign_data, steps):
    editor = StepEditor(campaign_data, steps)

    editor.move_step("step-3", 0)

    assert [step.id for step in editor.steps] == ["step-3", "step-1", "step-2"]
    assert editor.steps[0].delay_unit == DelayUnit.IMMEDIATELY
    assert (editor.steps[1].delay, editor.steps[1].delay_unit) == (FOLLOW_UP_DELAY, DelayUnit.BUSINESS_DAYS)


def test_update_step_validates(campaign_data, steps):
    editor = StepEditor(campaign_data, steps)

    editor.update_step("step-2", subject="New subject", delay=7)
    assert editor.get_step("step-2").subject == "New subject"
    assert editor.get_step("step-2").delay == 7

    with pytest.raises(ValidationError):
        editor.update_step("step-2", delay=-1)
    with pytest.raises(ValidationError):
        editor.update_step("step-2", delay_unit="weeks")
    with pytest.raises(ValueError):
        editor.update_step("step-2", id="step-9")
    with pytest.raises(KeyError):
        editor.update_step("missing", subject="x")


def test_insert_token(campaign_data, steps):
    editor = StepEditor(campaign_data, steps)

    step = editor.insert_token("step-2", "First Name")

    assert step.content.endswith("{{First Name}}")
    with pytest.raises(ValueError):
        editor.insert_token("step-2", "Favorite Color")


def test_insert_block(campaign_data, steps):
    editor = StepEditor(campaign_data, steps)

    step = editor.insert_block("step-2", "personalization")

    assert count_personalization_sections(step.content) == 1
    assert editor.insert_block("step-2", "button").content.endswith(HTML_BLOCKS["button"])
    with pytest.raises(ValueError):
        editor.insert_block("step-2", "personalization")
    with pytest.raises(ValueError):
        editor.insert_block("step-2", "carousel")


def test_preview_substitutes_tokens(campaign_data, steps):
    editor = StepEditor(campaign_data, steps)

    subject, content = editor.preview("step-1", Candidate(name="Jordan Smith", company="Mercy General"))

    assert subject == "Hi Jordan"
    assert content == "<p>Welcome to Mercy Health</p>"


def test_preview_without_candidate_keeps_name_token(campaign_data, steps):
    subject, _ = StepEditor(campaign_data, steps).preview("step-1")

    assert subject == "Hi {{First Name}}"
