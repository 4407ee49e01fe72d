"""
Entry point for the campaign assistant command line application
"""

import asyncio

from campaign_assistant import (
    CampaignAssistant,
    CampaignGenerator,
    ConversationSession,
    PersonalizationService,
    StepEditor,
)
from campaign_assistant.exceptions import NoGuidelineError
from campaign_assistant.models import Candidate
from campaign_assistant.store import InMemoryCampaignStore
from campaign_assistant.tokens import TokenContext, count_readable_words
from campaign_assistant.utils import setup_logging

SAMPLE_CANDIDATE = Candidate(name="Jordan Smith", company="Mercy General", skills=["ICU care", "patient triage"])


async def run_conversation(session: ConversationSession):
    """Prompt until the draft is confirmed"""
    while True:
        user_input = await asyncio.to_thread(input, "\nYou: ")
        if user_input.strip().lower() in ("quit", "exit"):
            return False

        response = await session.submit(user_input)
        print(f"\nAssistant: {response.message}")
        for suggestion in response.suggestions:
            print(f"  - {suggestion}")

        if response.is_complete:
            return True


async def run():
    print("=" * 80)
    print("Campaign Assistant - Interactive Conversation")
    print("=" * 80)

    company_name = input("Company name: ").strip() or None
    recruiter_name = input("Recruiter name: ").strip() or None

    session = ConversationSession(CampaignAssistant.from_env(), company_name, recruiter_name)
    print("\nAssistant: What's the main goal you want to achieve with this campaign?")

    if not await run_conversation(session):
        print("\nBye!")
        return

    try:
        campaign = await session.generate(CampaignGenerator.from_env())
    except NoGuidelineError as e:
        print(f"\n✗ {e}")
        return

    editor = StepEditor(campaign.campaign_data, campaign.email_steps)

    print("\n" + "=" * 80)
    print(f"CAMPAIGN GENERATED: {campaign.campaign_data.name}")
    print("=" * 80)
    for step in editor.steps:
        subject, content = editor.preview(step.id, SAMPLE_CANDIDATE)
        print(f"\n[{step.id}] +{step.delay} {step.delay_unit.value}")
        print(f"Subject: {subject}")
        print(f"Words: {count_readable_words(content)}")

    if campaign.campaign_data.enable_personalization and editor.steps:
        first = editor.steps[0]
        context = TokenContext(company_name=company_name, recruiter_name=recruiter_name)
        personalized = await asyncio.to_thread(
            PersonalizationService.from_env().personalize, first.content, SAMPLE_CANDIDATE, context
        )
        print(f"\nPersonalized preview of {first.id} for {SAMPLE_CANDIDATE.name}:\n{personalized}")

    outcome = await editor.save(InMemoryCampaignStore(), user_id="cli-user", project_id="cli-project")
    if outcome.ok:
        print(f"\n✓ Saved campaign {outcome.data['id']}")
    else:
        print(f"\n✗ {outcome.error}")


def main():
    """Main CLI entry point"""
    setup_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
