"""
Tool definitions and system instruction for the live fact-check session.
"""

# -----------------------------------------------------------
# System instruction
# -----------------------------------------------------------

SYSTEM_PROMPT = """You are a real-time fact-checker listening to audio. You will only listen. You are NOT allowed to respond to the user. Except by calling the check_fact function.

When you hear a VERIFIABLE FACTUAL CLAIM, call the check_fact function immediately.

Verifiable claims include:
- Statistics ("unemployment is 3.5%")
- Historical facts ("the Berlin Wall fell in 1989")
- Scientific claims ("the Earth is 4.5 billion years old")
- Specific attributions ("Einstein said E=mc²")

Do NOT flag:
- Opinions or subjective statements
- Future predictions
- Vague statements without specific facts

Be aggressive about detecting claims - when in doubt, flag it."""


# -----------------------------------------------------------
# Tool Definitions (schemas for function calling)
# -----------------------------------------------------------

CHECK_FACT_TOOL_NAME = "check_fact"

check_fact_def = {
    "name": CHECK_FACT_TOOL_NAME,
    "description": "Call this when you hear a verifiable factual claim that can be fact-checked.",
    "parameters": {
        "type": "object",
        "properties": {
            "claim": {
                "type": "string",
                "description": "The exact factual claim as stated",
            },
            "searchQuery": {
                "type": "string",
                "description": "Optimized search query for fact-checking this claim",
            },
            "confidence": {
                "type": "number",
                "description": "0-1, how verifiable/specific this claim is",
            },
        },
        "required": ["claim", "searchQuery", "confidence"],
    },
}

available_tools = [check_fact_def]
