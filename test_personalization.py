from campaign_assistant import PersonalizationService
from campaign_assistant.models import Candidate
from campaign_assistant.tokens import PERSONALIZATION_END, PERSONALIZATION_START, TokenContext

CANDIDATE = Candidate(name="Jordan Smith", company="Mercy General", skills=["ICU care"], job_title="RN", experience=6)
CONTEXT = TokenContext(company_name="Mercy Health", recruiter_name="Alex Rivera")
CONTENT = (
    "<p>Hi {{First Name}},</p>"
    f"{PERSONALIZATION_START}<p>Generic paragraph about {{{{Skill}}}}</p>{PERSONALIZATION_END}"
    "<p>Best, {{Recruiter Name}}</p>"
)


def test_content_without_section_only_gets_tokens(failing_llm):
    result = PersonalizationService(failing_llm).personalize("<p>Hi {{First Name}}</p>", CANDIDATE, CONTEXT)

    assert result == "<p>Hi Jordan</p>"


def test_section_replaced_with_llm_paragraph(recording_llm):
    llm, prompts = recording_llm("<p>Your six years of ICU care at Mercy General stand out.</p>")

    result = PersonalizationService(llm).personalize(CONTENT, CANDIDATE, CONTEXT)

    assert "Your six years of ICU care at Mercy General stand out." in result
    assert "Generic paragraph" not in result
    assert result.startswith("<p>Hi Jordan,</p>")
    assert result.endswith("<p>Best, Alex Rivera</p>")
    assert result.count(PERSONALIZATION_START) == 1
    assert "- Job Title: RN" in prompts[0]
    assert "- Experience: 6 years" in prompts[0]
    assert "Mercy Health" in prompts[0]


def test_bare_text_is_wrapped_in_paragraph(scripted_llm):
    result = PersonalizationService(scripted_llm("Your ICU background fits our team.")).personalize(
        CONTENT, CANDIDATE, CONTEXT
    )

    assert '<p style="color: #555;' in result
    assert "Your ICU background fits our team.</p>" in result


def test_code_fences_are_removed(scripted_llm):
    result = PersonalizationService(scripted_llm("```html\n<p>Fenced paragraph</p>\n```")).personalize(
        CONTENT, CANDIDATE, CONTEXT
    )

    assert "```" not in result
    assert "<p>Fenced paragraph</p>" in result


def test_llm_failure_falls_back_to_tokens(failing_llm):
    result = PersonalizationService(failing_llm).personalize(CONTENT, CANDIDATE, CONTEXT)

    assert "Generic paragraph about ICU care" in result
    assert result.startswith("<p>Hi Jordan,</p>")


def test_empty_llm_response_falls_back_to_tokens(scripted_llm):
    result = PersonalizationService(scripted_llm("   ")).personalize(CONTENT, CANDIDATE, CONTEXT)

    assert "Generic paragraph about ICU care" in result
