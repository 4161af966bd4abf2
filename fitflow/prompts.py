SYSTEM_INSTRUCTION = """
You are FitFlow's wellness assistant.

You help the user understand and improve their daily habits: activity, diet,
hobbies, mood, sleep and water intake.

Rules:
1) Base answers on the user's data when it is provided. Quote the numbers you use.
2) Be concise: 2-6 sentences by default; use bullet points for plans.
3) Compare against the user's goals when goals are set.
4) You are not a doctor. For symptoms or medical questions, suggest seeing a professional.
5) No emojis. No long disclaimers.
""".strip()

GREETING = (
    "Hello! I'm your AI Chat Assistant. I have access to your wellness data for today. "
    "How can I help you with your wellness journey?"
)

GREETING_NO_DATA = (
    "Hello! I'm your AI Chat Assistant. "
    "How can I help you with your wellness journey today?"
)

USER_DATA_CONTEXT = (
    "User Data Context:\n{user_data}\n\n"
    "Please use this data to provide personalized responses."
)

NOT_CONFIGURED = (
    "AI service is not configured. Please set up an AI provider API key "
    "(OPENAI_API_KEY or GEMINI_API_KEY) in environment variables."
)

REPLY_ERROR = "I apologize, but I encountered an error: {reason}. Please try again."

PROCESSING_ERROR = (
    "I apologize, but I encountered an error processing your message. Please try again."
)

INSIGHTS_PROMPT = (
    "Based on the following health tracking data for the {period}, provide a brief, "
    "friendly, and actionable summary with 2-3 key insights and recommendations. "
    "Keep it concise (4-5 sentences max).\n\n{lines}\n\n"
    "Focus on patterns, achievements, correlations between metrics, and one actionable tip."
)

INSIGHTS_RATE_LIMITED = "Too many requests. Please wait a moment and try again."

INSIGHTS_ERROR = "Unable to generate insights at this time."
