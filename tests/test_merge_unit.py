from merge import is_absent, merge_delta, merge_value
from models import AgendaItem, Committee, Company, DraftProtocol, ProtocolMember


def _draft() -> DraftProtocol:
    return DraftProtocol(
        number="98.1",
        due_date="2025-05-04",
        committee=Committee(id="c-1", name="Finance"),
        company=Company(name="Acme", number="5123", address=None),
        members=[ProtocolMember(name="Dana")],
        agenda_items=[AgendaItem(title="Budget")],
    )


def test_merge_value_keeps_current_for_null_and_blank() -> None:
    assert merge_value("a", None) == "a"
    assert merge_value("a", "  ") == "a"
    assert is_absent(None) and is_absent("") and not is_absent(0)


def test_merge_value_merges_objects_member_by_member() -> None:
    merged = merge_value({"id": "c-1", "name": "Finance"}, {"id": None, "name": "Audit"})
    assert merged == {"id": "c-1", "name": "Audit"}


def test_merge_value_replaces_sequences() -> None:
    assert merge_value([1, 2], [3]) == [3]
    assert merge_value([1, 2], []) == []


def test_null_fields_leave_draft_untouched() -> None:
    draft = _draft()
    updated, skipped = merge_delta(
        draft,
        {"number": None, "due_date": None, "committee": {"id": None, "name": None}, "company": None},
    )
    assert skipped == []
    assert updated == draft


def test_absent_nested_object_is_untouched() -> None:
    draft = _draft()
    updated, _ = merge_delta(draft, {"number": "99"})
    assert updated.company == draft.company
    assert updated.committee == draft.committee
    assert updated.number == "99"


def test_nested_object_merges_per_member() -> None:
    updated, _ = merge_delta(_draft(), {"company": {"address": "1 Main St", "name": None}})
    assert updated.company == Company(name="Acme", number="5123", address="1 Main St")


def test_members_replaced_not_appended() -> None:
    updated, _ = merge_delta(_draft(), {"members": [{"name": "Avi", "type": 2, "status": 2}]})
    assert [m.name for m in updated.members] == ["Avi"]


def test_empty_sequence_clears_list() -> None:
    updated, _ = merge_delta(_draft(), {"agenda_items": []})
    assert updated.agenda_items == []


def test_merging_same_delta_twice_is_idempotent() -> None:
    delta = {
        "number": 12,
        "due_date": "2025-06-01T09:30:00Z",
        "committee": {"name": "Board"},
        "members": ["Dana", {"name": "Avi", "status": "present"}],
        "agenda_items": [{"title": "Opening", "display_order": 1}],
    }
    once, _ = merge_delta(_draft(), delta)
    twice, _ = merge_delta(once, delta)
    assert once == twice


def test_malformed_field_is_skipped_and_rest_merges() -> None:
    draft = _draft()
    updated, skipped = merge_delta(draft, {"number": "12", "members": "not-an-array"})
    assert skipped == ["members"]
    assert updated.number == "12"
    assert updated.members == draft.members


def test_invalid_due_date_is_skipped() -> None:
    updated, skipped = merge_delta(_draft(), {"due_date": "next tuesday", "number": "5"})
    assert skipped == ["due_date"]
    assert updated.due_date == "2025-05-04"
    assert updated.number == "5"


def test_agenda_item_without_title_is_skipped() -> None:
    updated, skipped = merge_delta(_draft(), {"agenda_items": [{"title": None, "topic_content": "x"}]})
    assert skipped == ["agenda_items"]
    assert [item.title for item in updated.agenda_items] == ["Budget"]


def test_unknown_fields_are_ignored() -> None:
    draft = _draft()
    updated, skipped = merge_delta(draft, {"location": "Room 4"})
    assert skipped == []
    assert updated == draft


def test_merge_does_not_modify_input_draft() -> None:
    draft = _draft()
    before = draft.model_dump()
    merge_delta(draft, {"number": "1", "members": [], "company": {"name": "Other"}})
    assert draft.model_dump() == before
