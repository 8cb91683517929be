import logging
from typing import Sequence

from langgraph.graph import StateGraph, START, END

import config as settings
from completion import CompletionClient
from models import ConversationTurn, DraftProtocol, TurnResult, TurnState
from node_functions import build_messages, call_completion, parse_completion, route_parsed
from node_functions import merge_update, keep_draft
from prompts import get_improve_text_prompt

logger = logging.getLogger(__name__)


class EmptyInputError(ValueError):
    """Raised for blank user text; callers ignore the turn."""


graph = StateGraph(TurnState)

graph.add_node("build_messages", build_messages)
graph.add_node("call_completion", call_completion)
graph.add_node("parse_completion", parse_completion)
graph.add_node("merge_update", merge_update)
graph.add_node("keep_draft", keep_draft)

graph.add_edge(START, "build_messages")
graph.add_edge("build_messages", "call_completion")
graph.add_edge("call_completion", "parse_completion")
graph.add_conditional_edges(
    "parse_completion",
    route_parsed,
    {
        "structured": "merge_update",
        "unstructured": "keep_draft"
    })
graph.add_edge("merge_update", END)
graph.add_edge("keep_draft", END)
compiled = graph.compile()


def submit_turn(
    history: Sequence[ConversationTurn],
    user_text: str,
    draft: DraftProtocol,
    client: CompletionClient,
) -> TurnResult:
    """
    Run one user turn through the completion service and fold the answer into the draft.

    ``history`` and ``draft`` are left untouched; the returned result carries the
    extended history and the updated draft. CompletionFailure propagates to the
    caller with nothing changed.
    """
    text = (user_text or "").strip()
    if not text:
        raise EmptyInputError("user text is empty")

    final_state = compiled.invoke(
        {"history": list(history), "user_text": text, "draft": draft},
        config={"configurable": {"completion_client": client}},
    )

    new_history = (
        *history,
        ConversationTurn(role="user", content=text),
        ConversationTurn(role="assistant", content=final_state["raw_response"]),
    )
    return TurnResult(
        reply=final_state["reply"],
        updated_draft=final_state["updated_draft"],
        raw_delta=final_state["raw_delta"],
        history=new_history,
        skipped_fields=final_state["skipped_fields"],
    )


def improve_text(text: str, client: CompletionClient) -> str:
    """Ask the model to polish agenda text, keeping the original if nothing comes back."""
    messages = [
        {"role": "system", "content": get_improve_text_prompt()},
        {"role": "user", "content": text},
    ]
    improved = client.complete(
        messages,
        temperature=settings.IMPROVE_TEXT_TEMPERATURE,
        max_tokens=settings.IMPROVE_TEXT_MAX_TOKENS,
    )
    return (improved or "").strip() or text
