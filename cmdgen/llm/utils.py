"""
Utility functions for LLM providers.

Pulls the first text content out of the different SDK response shapes.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def _field(item: Any, name: str) -> Any:
    """Read a field from either an SDK object or a plain dict."""
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def extract_text_from_content(content: Any) -> str:
    """
    Extract text from content (handles both string and list-of-parts formats).
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    elif isinstance(content, list):
        text_parts = []
        for item in content:
            if _field(item, "type") == "text":
                text_parts.append(_field(item, "text") or "")
        return " ".join(text_parts)
    else:
        return str(content)


def first_text_block(content: Any) -> Optional[str]:
    """
    Return the text of the first content block, Anthropic style.

    Only the first block is considered; if it is not a text block
    (e.g. tool_use or thinking) there is no usable text.
    """
    if not content:
        return None
    block = content[0]
    if _field(block, "type") != "text":
        logger.debug(f"First content block is not text: {_field(block, 'type')}")
        return None
    return _field(block, "text")


def first_candidate_text(response: Any) -> Optional[str]:
    """
    Return the text of the first part of the first candidate, Gemini style.

    Blocked or empty responses have no candidates or no parts.
    """
    candidates = _field(response, "candidates") or []
    if not candidates:
        feedback = _field(response, "prompt_feedback")
        if feedback:
            logger.debug(f"Gemini returned no candidates: {feedback}")
        return None
    content = _field(candidates[0], "content")
    parts = _field(content, "parts") if content is not None else None
    if not parts:
        return None
    return _field(parts[0], "text")
