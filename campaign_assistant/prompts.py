"""
Prompt templates for the campaign assistant, plus the functions that bind their slots
"""

import json

from langchain_core.prompts import ChatPromptTemplate

from .constants.campaign_examples import CAMPAIGN_EXAMPLES
from .constants.conversation import CONVERSATION_STAGES, EMAIL_LENGTH_SPECS, TONE_SIGNATURES
from .models import EmailLength, Tone
from .state_machine import next_step
from .tokens import PERSONALIZATION_END, PERSONALIZATION_START

# Number of most recent history messages sent with each classification request
HISTORY_WINDOW = 6

# Collateral content is cut to this many characters in the generation prompt
COLLATERAL_CHAR_LIMIT = 300


# Prompt for classifying a conversation turn and extracting draft fields
CLASSIFIER_PROMPT_TEMPLATE = ChatPromptTemplate.from_messages([
    ("system", """You are an expert campaign creation assistant for healthcare recruitment. Your role is to help users create effective email campaigns by gathering their requirements and classifying them against proven campaign templates.

AVAILABLE CAMPAIGN EXAMPLES:
{campaign_examples}

RECENT SEARCHES CONTEXT:
{recent_searches_context}

CLASSIFICATION INSTRUCTIONS:
- Identify the single best matching campaign example as soon as the user describes their goal
- Include the "id" of that example in campaignDraft as "matchedExampleId" and its campaignType as "type"
- If no example is a perfect match, choose the closest one by campaign type and goal similarity

CONVERSATION FLOW (one field per turn, never skip ahead):
1. goal: the campaign goal, matched to an example
2. audience: who should receive the campaign
3. tone: communication tone (professional, friendly, casual, formal) and email length (short, concise, medium, long; default concise)
4. context: additional context or requirements
5. personalization: whether to enable per-candidate personalization
6. review: confirm the details, then generate

STEP RULES:
- Once a goal and matchedExampleId are set, move to 'audience' without waiting for confirmation
- audience: put specific audience options in the suggestions array, never in the message. Accept ANY audience description the user gives and move on
- tone: offer tone and email length options together in the suggestions array
- context: additionalContext MUST be the user's input exactly as written. Do not summarize, interpret or rewrite it
- personalization: set enablePersonalization to true or false based on the user's answer, then move to 'review'
- Set isComplete to true only when the user confirms the review

RESPONSE FORMAT:
Respond with a single JSON object:
{{
  "message": "Your conversational response to the user",
  "suggestions": ["helpful", "suggestions"],
  "campaignDraft": {{
    "goal": "user's campaign goal",
    "matchedExampleId": "id-of-best-matching-example",
    "type": "campaign type of the matched example",
    "targetAudience": "target audience",
    "tone": "professional|friendly|casual|formal",
    "emailLength": "short|concise|medium|long",
    "additionalContext": "VERBATIM user input in the context step",
    "enablePersonalization": true
  }},
  "nextStep": "goal|audience|tone|context|personalization|review|generate",
  "isComplete": false
}}
Only include campaignDraft fields you collected in this turn.

Current conversation context: The user is {conversation_stage}"""),
    ("human", """Current draft state: {draft_json}

Recent searches: {recent_searches}

Conversation history:
{conversation_history}

User input: "{user_input}"

Process this input, classify it against the available campaign examples and give the next step in the campaign creation process.""")
])


# Prompt for generating the full email sequence from a completed draft
GENERATION_PROMPT_TEMPLATE = ChatPromptTemplate.from_messages([
    ("system", """You are an expert email campaign generator specializing in healthcare recruitment. Create professional, engaging HTML email sequences.

HTML EMAIL REQUIREMENTS:
- Table based layout, max width 600px, inline CSS only, web-safe fonts
- Headings h2/h3 only, short paragraphs (2-3 sentences) or bullet lists
- Every email has a clear call to action formatted as an HTML link
- Minified HTML on a single line

CAMPAIGN EXAMPLE GUIDELINE:
{example_json}

The example is a GUIDELINE for sequencing, not a strict template. Create {step_count} email steps over {duration} days.
Use the example progression as a hint: {progression}

WORD COUNT:
- Target length: {length_range} ({length_description}) of READABLE TEXT per email
- Only rendered words count. Tags, styles and comments do not: "<p>Hello world</p>" is 2 words

TONE: {tone}
- Style: {tone_style}
- Start every email with "{tone_greeting}" and end with "{tone_closing}"

COMPANY KNOWLEDGE BASE (COLLATERAL):
{collateral_json}
- Integrate content collateral (who_we_are, mission_statements, benefits, dei_statements, newsletters) into the body
- Use link collateral (talent_community_link, career_site_link) as call-to-action links and company_logo as an image

ADDITIONAL CONTEXT:
The draft's additionalContext MUST be incorporated verbatim, without summarizing or rewriting.

PERSONALIZATION INSTRUCTIONS:
{personalization_instructions}

SCHEDULE:
- First email: delay 0, delayUnit "immediately"
- Later emails: increasing delays in "business days"

RESPONSE FORMAT:
Return a JSON object:
{{
  "campaignData": {{"name": "Campaign name"}},
  "emailSteps": [
    {{"type": "email", "subject": "Subject line", "content": "<table>...</table>", "delay": 0, "delayUnit": "immediately"}}
  ]
}}"""),
    ("human", """Campaign Draft:
{draft_json}

Generate the complete campaign with an HTML email sequence using the guideline structure.
Each email must be {length_range} of readable text with a {tone} tone.
{personalization_reminder}""")
])


# Prompt for writing the per-candidate paragraph of a personalized email
PERSONALIZATION_PROMPT_TEMPLATE = ChatPromptTemplate.from_messages([
    ("system", """You are an expert at creating personalized email content for recruitment campaigns.

Write one personalized paragraph (30-50 words) that will replace the personalization section of an email.

CANDIDATE PROFILE:
{candidate_profile}

GUIDELINES:
- Reference the candidate's current company
- Mention at least one specific skill from their profile
- Connect their background to the opportunity at {company_name}
- Use a warm, professional tone
- Format as a single HTML paragraph with inline styles

Return ONLY the paragraph. No explanations, no markdown, no additional text."""),
    ("human", """Email the paragraph will be placed in:
{email_content}

Write the personalized paragraph for {candidate_name}.""")
])


PERSONALIZATION_ENABLED_INSTRUCTIONS = f"""- This campaign WILL use per-candidate personalization
- Every email contains exactly ONE section wrapped in {PERSONALIZATION_START} and {PERSONALIZATION_END}
- Inside the section, reference the candidate's background, e.g. <p>Your experience with {{{{Skill}}}} at {{{{Current Company}}}} would be valuable in our team.</p>
- The section is replaced per candidate later, so keep it self-contained"""

PERSONALIZATION_DISABLED_INSTRUCTIONS = f"""- This campaign will NOT use per-candidate personalization
- Use only the tokens {{{{First Name}}}}, {{{{Company Name}}}} and {{{{Current Company}}}}
- Do not include {PERSONALIZATION_START} or {PERSONALIZATION_END} markers or any candidate-specific section"""


def format_history(history, window: int = HISTORY_WINDOW) -> str:
    """Render the last `window` messages as 'type: content' lines"""
    return "\n".join(f"{message.type}: {message.content}" for message in list(history)[-window:])


def truncate_collateral(content: str, limit: int = COLLATERAL_CHAR_LIMIT) -> str:
    if len(content) > limit:
        return content[:limit] + "..."
    return content


def build_classifier_inputs(user_input, history, draft, recent_searches) -> dict:
    """Slot values for CLASSIFIER_PROMPT_TEMPLATE"""
    recent_searches = list(recent_searches)
    if recent_searches:
        searches_context = (
            f"The user has performed these recent searches: {', '.join(recent_searches)}. "
            "Use these to suggest relevant target audiences when appropriate."
        )
    else:
        searches_context = "No recent searches available."

    return {
        "campaign_examples": json.dumps(
            [example.model_dump(mode="json", by_alias=True) for example in CAMPAIGN_EXAMPLES], indent=2
        ),
        "recent_searches_context": searches_context,
        "conversation_stage": CONVERSATION_STAGES[next_step(draft)],
        "draft_json": json.dumps(draft.model_dump(mode="json", by_alias=True, exclude_none=True)),
        "recent_searches": ", ".join(recent_searches),
        "conversation_history": format_history(history),
        "user_input": user_input,
    }


def build_generation_inputs(draft, example, collateral) -> dict:
    """Slot values for GENERATION_PROMPT_TEMPLATE"""
    tone = draft.tone or Tone.PROFESSIONAL
    signature = TONE_SIGNATURES[tone]
    length_spec = EMAIL_LENGTH_SPECS[draft.email_length or EmailLength.CONCISE]

    if collateral:
        collateral_json = json.dumps(
            [
                {"type": item.type, "content": truncate_collateral(item.content), "links": item.links}
                for item in collateral
            ],
            indent=2,
        )
    else:
        collateral_json = "No company collateral available."

    if draft.enable_personalization:
        instructions = PERSONALIZATION_ENABLED_INSTRUCTIONS
        reminder = "Include exactly one personalization section in every email."
    else:
        instructions = PERSONALIZATION_DISABLED_INSTRUCTIONS
        reminder = "Do not include personalization sections."

    sequence = example.sequence_and_examples
    return {
        "example_json": json.dumps(example.model_dump(mode="json", by_alias=True), indent=2),
        "step_count": sequence.steps,
        "duration": sequence.duration,
        "progression": " → ".join(sequence.examples),
        "length_range": length_spec["range"],
        "length_description": length_spec["description"],
        "tone": tone.value,
        "tone_style": signature["style"],
        "tone_greeting": signature["greeting"],
        "tone_closing": signature["closing"],
        "collateral_json": collateral_json,
        "personalization_instructions": instructions,
        "personalization_reminder": reminder,
        "draft_json": json.dumps(draft.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2),
    }


def build_personalization_inputs(content, candidate, company_name) -> dict:
    """Slot values for PERSONALIZATION_PROMPT_TEMPLATE"""
    profile = [
        f"- Name: {candidate.name}",
        f"- Current Company: {candidate.company}",
        f"- Skills: {', '.join(candidate.skills)}",
    ]
    if candidate.job_title:
        profile.append(f"- Job Title: {candidate.job_title}")
    if candidate.experience:
        profile.append(f"- Experience: {candidate.experience} years")

    return {
        "candidate_profile": "\n".join(profile),
        "candidate_name": candidate.name,
        "company_name": company_name,
        "email_content": content,
    }
