# app/models.py
from dataclasses import dataclass
from datetime import date, datetime
from enum import IntEnum
from typing import Any, Dict, List, Literal, Optional, Tuple, TypedDict, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class MemberType(IntEnum):
    INTERNAL = 1
    EXTERNAL = 2


class MemberStatus(IntEnum):
    INVITED = 1
    PRESENT = 2
    ABSENT = 3

    @classmethod
    def from_code(cls, code: int) -> "MemberStatus":
        """Any code other than invited/present counts as absent."""
        if code == cls.INVITED:
            return cls.INVITED
        if code == cls.PRESENT:
            return cls.PRESENT
        return cls.ABSENT


MEMBER_TYPE_NAMES = {"internal": MemberType.INTERNAL, "external": MemberType.EXTERNAL}
MEMBER_STATUS_NAMES = {
    "invited": MemberStatus.INVITED,
    "present": MemberStatus.PRESENT,
    "absent": MemberStatus.ABSENT,
}


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


History = Tuple[ConversationTurn, ...]


class Committee(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: Optional[str] = None
    name: Optional[str] = None


class Company(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    number: Optional[str] = None
    address: Optional[str] = None


class ProtocolMember(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: Optional[str] = None
    name: Optional[str] = None
    type: MemberType = MemberType.INTERNAL
    status: MemberStatus = MemberStatus.INVITED

    @model_validator(mode="before")
    @classmethod
    def _name_only(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value: Any) -> Any:
        if value is None:
            return MemberType.INTERNAL
        if isinstance(value, str):
            key = value.strip().lower()
            if key in MEMBER_TYPE_NAMES:
                return MEMBER_TYPE_NAMES[key]
            if key.isdigit():
                return int(key)
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> Any:
        if value is None:
            return MemberStatus.INVITED
        if isinstance(value, str):
            key = value.strip().lower()
            if key in MEMBER_STATUS_NAMES:
                return MEMBER_STATUS_NAMES[key]
            if not key.lstrip("-").isdigit():
                return value
            value = int(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return MemberStatus.from_code(value)
        return value


class AgendaItem(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: Optional[str] = None
    title: str
    topic_content: Optional[str] = None
    decision_content: Optional[str] = None
    display_order: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _title_only(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"title": data}
        return data

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("agenda item title is empty")
        return value


class DraftProtocol(BaseModel):
    """The protocol being drafted over the course of one conversation."""

    number: Optional[Union[str, int, float]] = None
    due_date: Optional[str] = None
    committee: Committee = Field(default_factory=Committee)
    company: Company = Field(default_factory=Company)
    members: List[ProtocolMember] = Field(default_factory=list)
    agenda_items: List[AgendaItem] = Field(default_factory=list)

    @field_validator("number", mode="before")
    @classmethod
    def _reject_bool_number(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("protocol number cannot be a boolean")
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def _normalize_due_date(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if not isinstance(value, str):
            raise ValueError(f"due_date must be an ISO-8601 string, got {type(value).__name__}")
        text = value.strip()
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
        except ValueError:
            raise ValueError(f"due_date is not an ISO-8601 date: {value!r}")

    def missing_fields(self) -> List[str]:
        missing = []
        if self.number is None or str(self.number).strip() == "":
            missing.append("number")
        if not self.due_date:
            missing.append("due_date")
        if not (self.committee.id or self.committee.name):
            missing.append("committee")
        if not self.agenda_items:
            missing.append("agenda_items")
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


@dataclass(frozen=True)
class Structured:
    """A completion that carried a JSON object."""

    delta: Dict[str, Any]
    reply: str


@dataclass(frozen=True)
class Unstructured:
    """A completion with no usable JSON object."""

    text: str


ParsedResponse = Union[Structured, Unstructured]


class TurnState(TypedDict, total=False):
    history: List[ConversationTurn]
    user_text: str
    draft: DraftProtocol
    messages: List[Dict[str, str]]
    raw_response: str
    parsed: ParsedResponse
    reply: str
    raw_delta: Optional[Dict[str, Any]]
    skipped_fields: List[str]
    updated_draft: DraftProtocol


class TurnResult(BaseModel):
    reply: str
    updated_draft: DraftProtocol
    raw_delta: Optional[Dict[str, Any]] = None
    history: History = ()
    skipped_fields: List[str] = Field(default_factory=list)
