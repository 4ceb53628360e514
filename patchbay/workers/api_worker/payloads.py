"""
Vendor wire formats - request bodies and response parsing

Shared by the direct API adapters and the browser-extension bridge
"""

from typing import Any, Dict, List, Sequence

from patchbay.agents.errors import AdapterError
from patchbay.models.message import Role, ViewedMessage

NO_GEMINI_RESPONSE = "No response from Gemini."


def build_openai_messages(persona: str, view: Sequence[ViewedMessage]) -> List[Dict[str, str]]:
    """Chat-completions messages: persona as system turn, then the view"""
    messages = [{"role": "system", "content": persona}]
    messages.extend({"role": m.role.value, "content": m.content} for m in view)
    return messages


def parse_openai_response(data: Dict[str, Any]) -> str:
    """
    Extract the reply from a chat-completions response

    Raises:
        AdapterError: If the response has no message content
    """
    try:
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise AdapterError(f"Malformed OpenAI response: {str(data)[:200]}")


def build_gemini_contents(persona: str, view: Sequence[ViewedMessage]) -> List[Dict[str, Any]]:
    """
    Gemini contents for a view

    Gemini has no system role, so the persona is prefixed to the first user
    turn, or sent as a user turn of its own when there is none
    """
    contents = [
        {
            "role": "model" if m.role == Role.ASSISTANT else "user",
            "parts": [{"text": m.content}],
        }
        for m in view
    ]

    for content in contents:
        if content["role"] == "user":
            content["parts"][0]["text"] = f"{persona}\n\n{content['parts'][0]['text']}"
            break
    else:
        contents.insert(0, {"role": "user", "parts": [{"text": persona}]})

    return contents


def parse_gemini_response(data: Dict[str, Any]) -> str:
    """
    Extract the reply from a generateContent REST response

    Raises:
        AdapterError: If a candidate is present but malformed
    """
    candidates = data.get("candidates") if isinstance(data, dict) else None
    if not candidates:
        return NO_GEMINI_RESPONSE
    try:
        return candidates[0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise AdapterError(f"Malformed Gemini response: {str(data)[:200]}")


def build_anthropic_messages(view: Sequence[ViewedMessage]) -> List[Dict[str, str]]:
    """Messages API turns; the persona travels in the separate system field"""
    return [{"role": m.role.value, "content": m.content} for m in view]


def parse_anthropic_response(data: Dict[str, Any]) -> str:
    """
    Extract the reply text blocks from a Messages API response

    Raises:
        AdapterError: If the response carries no text block
    """
    try:
        texts = [block["text"] for block in data["content"] if block.get("type") == "text"]
    except (KeyError, TypeError):
        raise AdapterError(f"Malformed Anthropic response: {str(data)[:200]}")
    if not texts:
        raise AdapterError("Anthropic response contained no text")
    return "".join(texts)
