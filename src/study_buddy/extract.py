"""Pull a JSON document out of free-form AI response text."""
import json
import re

FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


def extract_json_from_text(text):
    """Parse the first fenced code block, or the whole trimmed text, as JSON.

    Returns the parsed value, or None if the text is missing or isn't JSON.
    """
    if not isinstance(text, str):
        return None
    match = FENCED_BLOCK.search(text)
    candidate = match.group(1) if match else text.strip()
    try:
        return json.loads(candidate)
    except ValueError:
        return None


def is_json_document(text) -> bool:
    """True when the whole text, or a lone fenced block, is a JSON object or array."""
    if not isinstance(text, str):
        return False
    stripped = text.strip()
    match = FENCED_BLOCK.fullmatch(stripped)
    candidate = match.group(1) if match else stripped
    try:
        return isinstance(json.loads(candidate), (dict, list))
    except ValueError:
        return False
