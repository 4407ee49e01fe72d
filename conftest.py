import json

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableLambda

from campaign_assistant.models import CampaignDraft, CompanyCollateral, EmailLength, Tone


@pytest.fixture
def scripted_llm():
    """Build a chat model that answers with the given responses, in order"""

    def _make(*responses):
        return FakeListChatModel(
            responses=[item if isinstance(item, str) else json.dumps(item) for item in responses]
        )

    return _make


@pytest.fixture
def failing_llm():
    def _fail(_prompt):
        raise ConnectionError("LLM unavailable")

    return RunnableLambda(_fail)


@pytest.fixture
def recording_llm():
    """Chat model stand-in that records rendered prompts and answers with a fixed payload"""

    def _make(payload):
        prompts = []

        def _respond(prompt_value):
            prompts.append(prompt_value.to_string())
            content = payload if isinstance(payload, str) else json.dumps(payload)
            return AIMessage(content=content)

        return RunnableLambda(_respond), prompts

    return _make


@pytest.fixture
def review_draft():
    return CampaignDraft(
        goal="Build a talent community of ICU nurses",
        matched_example_id="talent-community-building",
        type="nurture",
        target_audience="ICU nurses in Denver with 3+ years experience",
        tone=Tone.FRIENDLY,
        email_length=EmailLength.CONCISE,
        additional_context="  Our Denver campus opens in <b>March</b>.\n\nSign-on bonus: $10k  ",
        enable_personalization=False,
        company_name="Mercy Health",
        recruiter_name="Alex Rivera",
    )


@pytest.fixture
def collateral():
    return [
        CompanyCollateral(type="who_we_are", content="Mercy Health is a network of 40 community hospitals."),
        CompanyCollateral(type="mission_statements", content="We deliver compassionate care to every neighborhood."),
        CompanyCollateral(type="benefits", content="Tuition reimbursement and flexible scheduling."),
        CompanyCollateral(type="career_site_link", content="https://careers.example.org"),
        CompanyCollateral(type="talent_community_link", content="https://careers.example.org/community"),
    ]
