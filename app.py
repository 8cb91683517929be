import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

import config
from api import create_protocol
from chatbot import improve_text, submit_turn
from completion import CompletionClient, CompletionFailure, get_completion_client
from extraction import extract_json_object
from memory_store import SessionBusyError, SessionNotFoundError, SessionStore
from models import DraftProtocol

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

COMPLETION_FAILED_MESSAGE = "Sorry, there was an error generating the protocol. Please try again."

app = FastAPI()

# In-memory session storage (use Redis/database in production)
sessions = SessionStore()

# Add debug handler for 422 errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation Error",
            "errors": exc.errors(),
            "received_body": str(exc.body)
        }
    )


class ChatRequest(BaseModel):
    session_id: str
    message: str


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ImproveTextRequest(BaseModel):
    text: str


def get_client() -> CompletionClient:
    """Completion client set on app.state, else one built from the environment."""
    client = getattr(app.state, "completion_client", None)
    if client is None:
        client = get_completion_client()
        app.state.completion_client = client
    return client


def draft_view(draft: DraftProtocol) -> Dict[str, Any]:
    return {
        "draft": draft.model_dump(mode="json"),
        "missing_fields": draft.missing_fields(),
        "is_complete": draft.is_complete,
    }


@app.post("/chat")
def chat(req: ChatRequest):
    if not req.session_id:
        raise HTTPException(status_code=400, detail="session_id is required")

    if not req.message.strip():
        try:
            draft = sessions.get(req.session_id).draft
        except SessionNotFoundError:
            draft = DraftProtocol()
        return {"ignored": True, "reply": None, "raw_delta": None, "skipped_fields": [], **draft_view(draft)}

    try:
        session = sessions.begin_turn(req.session_id)
    except SessionBusyError:
        raise HTTPException(status_code=409, detail="A message for this session is still being processed")

    result = None
    try:
        result = submit_turn(session.history, req.message, session.draft, get_client())
    except CompletionFailure as e:
        logger.error("Completion failed for session %s: %s", req.session_id, e)
        raise HTTPException(status_code=502, detail=COMPLETION_FAILED_MESSAGE)
    finally:
        sessions.finish_turn(session, result)

    return {
        "ignored": False,
        "reply": result.reply,
        "raw_delta": result.raw_delta,
        "skipped_fields": result.skipped_fields,
        **draft_view(result.updated_draft),
    }


@app.get("/session/{session_id}")
def get_session(session_id: str):
    """Get current session state"""
    try:
        session = sessions.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")

    return {
        "session_id": session_id,
        "history": [turn.model_dump() for turn in session.history],
        "in_flight": session.in_flight,
        **draft_view(session.draft),
    }


@app.delete("/session/{session_id}")
def clear_session(session_id: str):
    """Clear a session; the next message starts a new draft"""
    try:
        deleted = sessions.delete(session_id)
    except SessionBusyError:
        raise HTTPException(status_code=409, detail="A message for this session is still being processed")
    if deleted:
        return {"message": "Session cleared successfully"}
    raise HTTPException(status_code=404, detail="Session not found")


@app.post("/session/{session_id}/confirm")
def confirm_protocol(session_id: str):
    try:
        session = sessions.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    if session.in_flight:
        raise HTTPException(status_code=409, detail="A message for this session is still being processed")

    missing = session.draft.missing_fields()
    if missing:
        raise HTTPException(status_code=422, detail={"message": "Protocol is incomplete", "missing_fields": missing})
    if not config.PROTOCOLS_API_URL:
        raise HTTPException(status_code=503, detail="Protocol storage is not configured")

    api_response = create_protocol(session.draft)
    if not api_response.get("success"):
        raise HTTPException(status_code=502, detail=api_response.get("error", "An unknown error occurred"))

    try:
        sessions.delete(session_id)
    except SessionBusyError:
        logger.warning("Session %s received a new message while its protocol was being stored", session_id)
    return {"protocol": api_response["data"]}


@app.post("/ai-protocol")
async def ai_protocol(request: Request):
    """Single completion over caller-supplied messages, with the JSON block extracted when present."""
    try:
        body = await request.json()
    except ValueError:
        body = None
    messages = body.get("messages") if isinstance(body, dict) else None
    if not messages or not isinstance(messages, list):
        raise HTTPException(status_code=400, detail="Missing or invalid messages array")
    try:
        parsed_messages: List[Dict[str, str]] = [ChatMessage.model_validate(m).model_dump() for m in messages]
    except ValueError:
        raise HTTPException(status_code=400, detail="Missing or invalid messages array")

    try:
        content = await run_in_threadpool(
            get_client().complete, parsed_messages, temperature=config.PROTOCOL_TEMPERATURE
        )
    except CompletionFailure as e:
        logger.error("Protocol completion failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))

    result: Optional[Any] = extract_json_object(content)
    return {"result": result if result is not None else content}


@app.post("/improve-text")
def improve(req: ImproveTextRequest):
    if not req.text.strip():
        raise HTTPException(status_code=400, detail="Invalid text")
    try:
        improved = improve_text(req.text, get_client())
    except CompletionFailure as e:
        logger.error("Text improvement failed: %s", e)
        raise HTTPException(status_code=502, detail="Text improvement failed")
    return {"improvedText": improved}


@app.get("/health")
def health_check():
    return {"status": "healthy", "active_sessions": len(sessions)}
