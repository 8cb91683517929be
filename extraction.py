# app/extraction.py
import json
import logging
import re

from models import ParsedResponse, Structured, Unstructured

logger = logging.getLogger(__name__)

REPLY_KEY = "conversation_result"
CONTINUATION_PROMPT = "Thanks, I've noted that. What else should go into the protocol?"

FENCED_JSON_RE = re.compile(r"```json[ \t]*\r?\n([\s\S]*?)```")


def find_fenced_json(text: str):
    """Contents of the first ```json fenced block, or None."""
    match = FENCED_JSON_RE.search(text)
    if match:
        return match.group(1)
    return None


def _load_object(candidate: str):
    try:
        value = json.loads(candidate)
    except (json.JSONDecodeError, TypeError):
        return None
    if isinstance(value, dict):
        return value
    return None


def extract_json_object(text: str):
    fenced = find_fenced_json(text)
    if fenced is not None:
        obj = _load_object(fenced)
        if obj is not None:
            return obj
        logger.info("Fenced json block did not hold a JSON object; trying the whole response")
    return _load_object(text)


def parse_response(raw: str) -> ParsedResponse:
    """
    Split a raw completion into a structured delta plus reply, or plain text.

    A fenced ```json block wins over the whole text; prose around the block is
    ignored. When neither holds a JSON object the raw text becomes the reply.
    """
    raw = raw or ""
    obj = extract_json_object(raw)
    if obj is None:
        if raw.strip():
            logger.info("No JSON object in completion; replying with raw text")
            return Unstructured(text=raw)
        return Unstructured(text=CONTINUATION_PROMPT)

    delta = dict(obj)
    reply = delta.pop(REPLY_KEY, None)
    if not isinstance(reply, str) or not reply.strip():
        reply = CONTINUATION_PROMPT
    return Structured(delta=delta, reply=reply)
