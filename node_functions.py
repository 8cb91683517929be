import logging

from langchain_core.runnables import RunnableConfig

import config as settings
from extraction import parse_response
from merge import merge_delta
from models import Structured, TurnState
from prompts import get_protocol_system_prompt

logger = logging.getLogger(__name__)


def build_messages(state: TurnState) -> dict:
    """System instruction first, then the replayed history, then the new user turn."""
    messages = [{"role": "system", "content": get_protocol_system_prompt()}]
    for turn in state.get("history", []):
        messages.append({"role": turn.role, "content": turn.content})
    messages.append({"role": "user", "content": state["user_text"]})
    return {"messages": messages}


def call_completion(state: TurnState, config: RunnableConfig) -> dict:
    client = config["configurable"]["completion_client"]
    raw = client.complete(state["messages"], temperature=settings.PROTOCOL_TEMPERATURE)
    return {"raw_response": raw}


def parse_completion(state: TurnState) -> dict:
    return {"parsed": parse_response(state.get("raw_response", ""))}


def route_parsed(state: TurnState) -> str:
    if isinstance(state["parsed"], Structured):
        return "structured"
    return "unstructured"


def merge_update(state: TurnState) -> dict:
    parsed = state["parsed"]
    updated, skipped = merge_delta(state["draft"], parsed.delta)
    if skipped:
        logger.warning("Merged protocol delta with skipped fields: %s", ", ".join(skipped))
    return {
        "reply": parsed.reply,
        "raw_delta": parsed.delta,
        "updated_draft": updated,
        "skipped_fields": skipped,
    }


def keep_draft(state: TurnState) -> dict:
    return {
        "reply": state["parsed"].text,
        "raw_delta": None,
        "updated_draft": state["draft"],
        "skipped_fields": [],
    }
