# invisibrain/prompts.py - ACTIVELY USED
# Prompt templates for each assistant feature

"""
Prompt templates.

Each feature has one template. The "previous conversation" and
"additional context" blocks are rendered only when there is something to
put in them, so an empty history never produces an empty header.
"""

from typing import Dict

SCREENSHOT_ANALYSIS = """
You are Invisibrain, an expert programming assistant specializing in Python and Java development, algorithm optimization, and problem-solving across various platforms.

Analyze the screenshot(s) carefully:
1. Identify the problem or error shown, reading ALL visible constraints and the exact input/output format
2. Provide a complete, runnable solution in Python (Java only if the screenshot shows Java or it is requested)
3. If an error is shown, explain the root cause and give the fix under "=== CORRECTED CODE ==="
4. Include time and space complexity for algorithmic problems
5. Make sure the solution handles all edge cases

FORMAT YOUR RESPONSE AS:
**Problem Understanding:**
**Approach:**
**Complexity:**
**Solution:**
**Explanation:**

{history}{additional_context}Now provide your response.
"""

SUGGEST_RESPONSE = """
You are Invisibrain, helping suggest appropriate responses.

Context: {situation}

{history}Provide 3 concise, professional response suggestions.
"""

MEETING_NOTES = """
Generate professional meeting notes from this conversation:

{conversation}

Format as:
- Key Discussion Points
- Decisions Made
- Action Items
- Next Steps
"""

FOLLOW_UP_EMAIL = """
Generate a professional follow-up email based on this conversation:

{conversation}

Include:
- Brief summary
- Key points discussed
- Action items
- Professional closing
"""

ANSWER_QUESTION = """
You are Invisibrain, an expert Python programming assistant.

{history}Question: {question}

Provide a clear, concise answer focusing on Python best practices and optimization.
"""

INSIGHTS = """
Analyze this conversation and provide insights:

{conversation}

Include:
- Key themes
- Technical patterns observed
- Potential improvements
- Recommendations
"""

TEMPLATES: Dict[str, str] = {
    "screenshot_analysis": SCREENSHOT_ANALYSIS,
    "suggest_response": SUGGEST_RESPONSE,
    "meeting_notes": MEETING_NOTES,
    "follow_up_email": FOLLOW_UP_EMAIL,
    "answer_question": ANSWER_QUESTION,
    "insights": INSIGHTS,
}


def _section(title: str, body: str) -> str:
    if not body:
        return ""
    return f"{title}:\n{body}\n\n"


def build_prompt(name: str, context_string: str = "", **fields: str) -> str:
    """
    Render a feature prompt.

    Args:
        name: Template name (a key of TEMPLATES)
        context_string: Rendered conversation history, possibly empty
        **fields: Template-specific values (situation, question, additional_context)

    Returns:
        The prompt text, stripped of surrounding whitespace
    """
    try:
        template = TEMPLATES[name]
    except KeyError:
        raise ValueError(f"Unknown prompt template: {name}") from None

    values = {
        "history": _section("Previous conversation", context_string),
        "conversation": context_string,
        "additional_context": _section("Additional context", fields.pop("additional_context", "")),
    }
    values.update(fields)
    return template.format(**values).strip()
