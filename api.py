import logging
import requests
import json
from typing import Dict, Any, List

import config
from models import DraftProtocol

logger = logging.getLogger(__name__)


def _headers() -> Dict[str, str]:
    return {
        "apikey": config.PROTOCOLS_API_KEY,
        "Authorization": f"Bearer {config.PROTOCOLS_API_KEY}",
        "Content-Type": "application/json",
        "Prefer": "return=representation",
    }


def _insert(table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    url = f"{config.PROTOCOLS_API_URL}/rest/v1/{table}"
    logger.info("Inserting %d row(s) into %s", len(rows), table)
    response = requests.post(url, headers=_headers(), json=rows, timeout=config.PROTOCOLS_API_TIMEOUT)
    response.raise_for_status()
    return response.json()


def build_protocol_rows(draft: DraftProtocol) -> Dict[str, Any]:
    """Row payloads for the protocols, agenda_items and protocol_members tables."""
    protocol = {
        "number": str(draft.number) if draft.number is not None else None,
        "due_date": draft.due_date,
        "committee_id": draft.committee.id,
    }
    agenda_items = [
        {
            "title": item.title,
            "topic_content": item.topic_content or "",
            "decision_content": item.decision_content or "",
            "display_order": item.display_order if item.display_order is not None else position,
        }
        for position, item in enumerate(draft.agenda_items, 1)
    ]
    members = [
        {
            "name": member.name,
            "type": int(member.type),
            "status": int(member.status),
        }
        for member in draft.members
    ]
    return {"protocol": protocol, "agenda_items": agenda_items, "members": members}


def _delete_protocol(protocol_id: Any) -> None:
    """Remove a half-written protocol and any child rows already stored."""
    filters = [
        ("protocol_members", {"protocol_id": f"eq.{protocol_id}"}),
        ("agenda_items", {"protocol_id": f"eq.{protocol_id}"}),
        ("protocols", {"id": f"eq.{protocol_id}"}),
    ]
    for table, params in filters:
        url = f"{config.PROTOCOLS_API_URL}/rest/v1/{table}"
        try:
            response = requests.delete(url, headers=_headers(), params=params, timeout=config.PROTOCOLS_API_TIMEOUT)
            response.raise_for_status()
        except requests.exceptions.RequestException as err:
            logger.error("Could not roll back %s for protocol %s: %s", table, protocol_id, err)


def create_protocol(draft: DraftProtocol) -> Dict[str, Any]:
    """Persist a confirmed draft through the hosted database REST API.

    When a child insert fails, the protocol row is deleted again so a retry
    does not leave a duplicate behind.
    """
    if not config.PROTOCOLS_API_URL:
        return {"success": False, "error": "Protocol storage is not configured."}

    rows = build_protocol_rows(draft)
    try:
        created = _insert("protocols", [rows["protocol"]])
        protocol = created[0]
        protocol_id = protocol["id"]
        try:
            if rows["agenda_items"]:
                _insert("agenda_items", [{**item, "protocol_id": protocol_id} for item in rows["agenda_items"]])
            if rows["members"]:
                _insert("protocol_members", [{**member, "protocol_id": protocol_id} for member in rows["members"]])
        except (requests.exceptions.RequestException, json.JSONDecodeError, KeyError, IndexError, TypeError):
            logger.warning("Rolling back protocol %s after a failed child insert", protocol_id)
            _delete_protocol(protocol_id)
            raise
        return {"success": True, "data": protocol}
    except requests.exceptions.HTTPError as http_err:
        logger.error("HTTP error occurred: %s", http_err)
        return {"success": False, "error": f"A server error occurred (Status code: {http_err.response.status_code})."}
    except (json.JSONDecodeError, KeyError, IndexError, TypeError):
        logger.error("Failed to parse the storage response")
        return {"success": False, "error": "The storage returned data in an unexpected format."}
    except requests.exceptions.RequestException as req_err:
        logger.error("A network error occurred: %s", req_err)
        return {"success": False, "error": "Could not connect to the protocol storage. Please ensure it is running and accessible."}
