# app/merge.py
import logging
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from models import DraftProtocol

logger = logging.getLogger(__name__)


def is_absent(value: Any) -> bool:
    """Null and blank strings never overwrite what the draft already holds."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def merge_value(current: Any, incoming: Any) -> Any:
    """
    Merge one value of a JSON-like tree into another.

    Scalars overwrite only when the incoming value is present. Objects merge
    key by key with the same rule. Sequences replace the current value
    wholesale, even when empty.
    """
    if is_absent(incoming):
        return current
    if isinstance(incoming, dict):
        if not isinstance(current, dict):
            current = {}
        merged = dict(current)
        for key, value in incoming.items():
            merged[key] = merge_value(current.get(key), value)
        return merged
    if isinstance(incoming, (list, tuple)):
        return list(incoming)
    return incoming


def merge_delta(draft: DraftProtocol, delta: Dict[str, Any]) -> Tuple[DraftProtocol, List[str]]:
    """
    Fold one delta into the draft, field by field.

    Returns the new draft and the names of the fields that were dropped
    because their merged value did not validate. The input draft is never
    modified.
    """
    merged = draft.model_dump()
    skipped = []
    for field, incoming in delta.items():
        if field not in DraftProtocol.model_fields:
            logger.debug("Ignoring unknown draft field %r", field)
            continue
        candidate = merge_value(merged[field], incoming)
        try:
            DraftProtocol.model_validate({**merged, field: candidate})
        except ValidationError as exc:
            logger.warning("Skipping malformed draft field %r: %s", field, exc.errors()[0]["msg"])
            skipped.append(field)
            continue
        merged[field] = candidate
    return DraftProtocol.model_validate(merged), skipped
