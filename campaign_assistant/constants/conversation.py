"""
Static conversation tables keyed by conversation step
"""

from ..models import ConversationStep, EmailLength, Tone

FALLBACK_RESPONSES = {
    ConversationStep.GOAL: {
        "message": "I'd love to help you create a campaign! What's the main goal you want to achieve with this campaign?",
        "suggestions": [
            "Build a talent community for healthcare professionals",
            "Nurture passive candidates with industry insights",
            "Reengage inactive candidates with new opportunities",
            "Provide educational content to boost candidate skills",
        ],
    },
    ConversationStep.AUDIENCE: {
        "message": "Great goal! Now, who is your target audience for this campaign?",
        "suggestions": [
            "Healthcare professionals nationwide",
            "Registered nurses in specific locations",
            "New graduates entering healthcare",
            "Experienced specialists in oncology/ICU",
        ],
    },
    ConversationStep.TONE: {
        "message": "Perfect! What tone would you like for your campaign communications, and what email length do you prefer?",
        "suggestions": [
            "Professional tone, concise emails (60-80 words)",
            "Friendly tone, medium emails (100-120 words)",
            "Professional tone, short emails (30-50 words)",
            "Warm tone, long emails (150+ words)",
        ],
    },
    ConversationStep.CONTEXT: {
        "message": "Excellent! Is there any additional context or specific requirements for this campaign?",
        "suggestions": [
            "Include company benefits information",
            "Focus on career development opportunities",
            "Highlight work-life balance",
            "Emphasize competitive compensation",
        ],
    },
    ConversationStep.PERSONALIZATION: {
        "message": (
            "Would you like to enable personalization for each candidate? This will customize the email "
            "content based on each candidate's profile data."
        ),
        "suggestions": ["Yes, enable personalization", "No, use general content for all candidates"],
    },
    ConversationStep.REVIEW: {
        "message": "Let me review your campaign details. Does everything look correct?",
        "suggestions": ["Yes, generate the campaign", "Let me make some changes"],
    },
    ConversationStep.GENERATE: {
        "message": "Everything is in place. Generating your campaign now.",
        "suggestions": [],
    },
}

# Messages used when a keyword rule captured the field for this turn
ACKNOWLEDGEMENTS = {
    ConversationStep.GOAL: "Got it! I've matched your goal to a proven campaign structure. Now, who is your target audience for this campaign?",
    ConversationStep.AUDIENCE: (
        'Perfect! I\'ve set your target audience as "{target_audience}". Now, what tone would you like for '
        "your campaign communications, and what email length do you prefer?"
    ),
    ConversationStep.TONE: (
        "Great choice on the {tone} tone and {email_length} email length! We'll ensure the emails maintain a "
        "{tone} tone and are {email_length} in length. Let's move on to gather any additional context or "
        "specific requirements you might have for this campaign. Is there any particular information or "
        "detail you'd like to include?"
    ),
    ConversationStep.CONTEXT: (
        "Perfect! I've captured your additional context exactly as provided. Now, would you like to enable "
        "personalization for each candidate? This will customize the email content based on each "
        "candidate's profile data."
    ),
    "personalization_enabled": (
        "Great! I've enabled personalization for your campaign. Each email will be customized based on the "
        "candidate's profile data. Your campaign is now ready for generation. Let me review the details with "
        "you before we proceed."
    ),
    "personalization_disabled": (
        "Understood. I've disabled personalization for your campaign. All candidates will receive the same "
        "email content. Your campaign is now ready for generation. Let me review the details with you before "
        "we proceed."
    ),
    ConversationStep.REVIEW: "Great! Your campaign details are confirmed. Generating your campaign now.",
}

REVIEW_SUGGESTIONS = [
    "Generate the campaign now",
    "Let me review the details first",
    "I want to make some changes",
]

RECENT_SEARCH_AUDIENCE_MESSAGE = (
    "Great! Now let's define your target audience. Based on your recent searches, I've prepared some "
    "options for you to choose from, or you can describe a different audience."
)
RECENT_SEARCH_SUGGESTION = 'Candidates matching: "{search}"'
MAX_SEARCH_SUGGESTIONS = 3

AUDIENCE_KEYWORDS = [
    "candidates", "nurses", "professionals", "specialists", "workers", "staff", "employees", "people",
    "individuals", "practitioners", "technicians", "administrators", "managers", "directors", "coordinators",
]
LOCATION_KEYWORDS = ["in", "from", "at", "near", "around", "within"]
EXPERIENCE_KEYWORDS = ["years", "experience", "experienced", "senior", "junior", "entry", "level"]

# Priority order: when several keywords appear, the entry listed first wins
TONE_KEYWORDS = {
    "friendly": Tone.FRIENDLY,
    "casual": Tone.CASUAL,
    "warm": Tone.FRIENDLY,
    "formal": Tone.FORMAL,
    "professional": Tone.PROFESSIONAL,
}
EMAIL_LENGTH_KEYWORDS = {
    "short": EmailLength.SHORT,
    "brief": EmailLength.SHORT,
    "medium": EmailLength.MEDIUM,
    "long": EmailLength.LONG,
    "detailed": EmailLength.LONG,
    "concise": EmailLength.CONCISE,
}
DEFAULT_TONE = Tone.PROFESSIONAL
DEFAULT_EMAIL_LENGTH = EmailLength.CONCISE

PERSONALIZATION_KEYWORDS = ["yes", "enable", "personalization", "customize", "personalize"]

REVIEW_CONFIRM_KEYWORDS = ["yes", "generate", "looks good", "go ahead", "proceed", "confirm", "correct", "ready"]
REVIEW_REJECT_KEYWORDS = ["change", "edit", "modify", "not yet", "wait", "review the details"]

# Inputs at or below this many characters are too short to be a goal, audience or context
MIN_FREE_TEXT_LENGTH = 10

EMAIL_LENGTH_SPECS = {
    EmailLength.SHORT: {"range": "30-50 words", "description": "Brief and to the point", "min_words": 30, "max_words": 50},
    EmailLength.CONCISE: {"range": "60-80 words", "description": "Balanced and focused", "min_words": 60, "max_words": 80},
    EmailLength.MEDIUM: {"range": "100-120 words", "description": "Detailed but readable", "min_words": 100, "max_words": 120},
    EmailLength.LONG: {"range": "150+ words", "description": "Comprehensive and thorough", "min_words": 150, "max_words": None},
}

CONVERSATION_STAGES = {
    ConversationStep.GOAL: "starting the campaign creation process",
    ConversationStep.AUDIENCE: "defining their target audience",
    ConversationStep.TONE: "selecting the campaign tone and email length",
    ConversationStep.CONTEXT: "providing additional context",
    ConversationStep.PERSONALIZATION: "choosing personalization preferences",
    ConversationStep.REVIEW: "reviewing their campaign details",
    ConversationStep.GENERATE: "ready to generate the campaign",
}

# Salutation and sign-off for each tone, shared by the prompt and the fallback generator
TONE_SIGNATURES = {
    Tone.PROFESSIONAL: {
        "greeting": "Dear {{First Name}}",
        "closing": "Sincerely, {{Recruiter Name}}",
        "style": "Formal language, complete sentences, a neutral and authoritative voice, concise paragraphs.",
    },
    Tone.FRIENDLY: {
        "greeting": "Hey {{First Name}}!",
        "closing": "Best, {{Recruiter Name}}",
        "style": "Warm, conversational language, short sentences and supportive phrases.",
    },
    Tone.CASUAL: {
        "greeting": "Hey {{First Name}}",
        "closing": "Cheers, {{Recruiter Name}}",
        "style": "Informal language with contractions, short punchy sentences, a playful and relatable tone.",
    },
    Tone.FORMAL: {
        "greeting": "Dear {{First Name}}",
        "closing": "Yours sincerely, {{Recruiter Name}}",
        "style": "Precise, sophisticated language without contractions, a respectful voice, structured paragraphs.",
    },
}
