import re

# Leading fence, optionally tagged with a language, and the closing fence
_OPENING_FENCE = re.compile(r"^```[ \t]*(?:json)?[ \t]*\r?\n?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\r?\n?```$")

def strip_code_fences(text: str) -> str:
    """
    Removes a markdown code fence wrapped around a model response.
    Text without fences is only trimmed; braces inside the payload are never touched.
    """
    if not text:
        return ""
    cleaned = text.strip()
    cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()
