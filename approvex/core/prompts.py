"""
Centralized AI prompt repository.
"""

# --- DECISION SUMMARY PROMPTS ---
DECISION_SUMMARY_SYSTEM = (
    "You write short, neutral, professional decision summaries for enterprise approval workflows.\n\n"
    "Rules:\n"
    "- Max 1-2 sentences.\n"
    "- Neutral tone, no blame.\n"
    "- Do NOT include emojis.\n"
    "- Do NOT invent facts.\n"
    "- If information is insufficient, be generic (e.g., \"based on policy review\")."
)

DECISION_SUMMARY_USER_TEMPLATE = (
    "Generate a decision summary for a {request_type} request that was {status}.\n\n"
    "Known inputs:\n"
    "- Manager comment: {manager_comment}\n"
    "- Request data: {request_data}\n"
)
