"""Per-entity field mappings for the collection query engine.

Each schema declares which fields are searchable, which are enum, flag,
array or date filters, which date drives the timeline filters and how the
list is ordered by default. The stats functions reduce the full, unfiltered
collection of one user.
"""

from datetime import datetime
from typing import Any, Dict, List

from app.services.collection_query import (
    CollectionSchema,
    FieldKind,
    SortKey,
    average_field,
    count_where,
    field_value,
    sum_field,
    to_datetime,
    value_counts,
)

TOP_TAGS_LIMIT = 10
HIGH_PRIORITIES = ("high", "urgent")
PRIORITY_RANKING = ("low", "medium", "high", "urgent")

TEXT = FieldKind.TEXT
ENUM = FieldKind.ENUM
FLAG = FieldKind.FLAG
DATE = FieldKind.DATE
ARRAY = FieldKind.ARRAY
NUMBER = FieldKind.NUMBER


def _before(value: Any, moment: datetime) -> bool:
    parsed = to_datetime(value, moment.tzinfo)
    return parsed is not None and parsed < moment


def _after(value: Any, moment: datetime) -> bool:
    parsed = to_datetime(value, moment.tzinfo)
    return parsed is not None and parsed > moment


def _has_contacts(record: Any) -> bool:
    contacts = field_value(record, "contacts")
    return isinstance(contacts, dict) and any(contacts.values())


def _attendee_count(record: Any) -> int:
    count = field_value(record, "attendee_count")
    if count is not None:
        return count
    return len(field_value(record, "attendees") or [])


def _today(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def note_stats(records: List[Any], now: datetime) -> Dict[str, Any]:
    tag_counts = value_counts(records, "tags")
    top_tags = sorted(tag_counts.items(), key=lambda item: (-item[1], str(item[0])))
    return {
        "total": len(records),
        "pinned": count_where(records, lambda r: field_value(r, "is_pinned") is True),
        "favorites": count_where(
            records, lambda r: field_value(r, "is_favorite") is True
        ),
        "total_views": int(sum_field(records, "view_count")),
        "categories": len(value_counts(records, "category")),
        "top_tags": [
            {"tag": tag, "count": count} for tag, count in top_tags[:TOP_TAGS_LIMIT]
        ],
    }


def person_stats(records: List[Any], now: datetime) -> Dict[str, Any]:
    return {
        "total": len(records),
        "roles": len(value_counts(records, "role")),
        "with_contacts": count_where(records, _has_contacts),
    }


def skill_stats(records: List[Any], now: datetime) -> Dict[str, Any]:
    return {
        "total": len(records),
        "total_hours": round(sum_field(records, "practice_hours"), 1),
        "avg_progress": average_field(records, "progress"),
        "expert_count": count_where(records, lambda r: field_value(r, "level") == "expert"),
        "in_progress": count_where(
            records, lambda r: 0 < (field_value(r, "progress") or 0) < 100
        ),
    }


def project_stats(records: List[Any], now: datetime) -> Dict[str, Any]:
    return {
        "total": len(records),
        "in_progress": count_where(
            records, lambda r: field_value(r, "status") == "in-progress"
        ),
        "completed": count_where(
            records, lambda r: field_value(r, "status") == "completed"
        ),
        "overdue": count_where(
            records,
            lambda r: field_value(r, "status") != "completed"
            and _before(field_value(r, "deadline"), now),
        ),
        "avg_progress": average_field(records, "progress"),
    }


def event_stats(records: List[Any], now: datetime) -> Dict[str, Any]:
    return {
        "total": len(records),
        "total_attendees": sum(_attendee_count(r) for r in records),
        "with_certificates": count_where(
            records, lambda r: bool(field_value(r, "certificate_url"))
        ),
        "total_spent": sum_field(records, "cost"),
        "upcoming": count_where(
            records, lambda r: _after(field_value(r, "start_date"), now)
        ),
    }


def task_stats(records: List[Any], now: datetime) -> Dict[str, Any]:
    today = _today(now)
    return {
        "total": len(records),
        "not_started": count_where(
            records, lambda r: field_value(r, "status") == "not-started"
        ),
        "in_progress": count_where(
            records, lambda r: field_value(r, "status") == "in-progress"
        ),
        "done": count_where(records, lambda r: field_value(r, "status") == "done"),
        "overdue": count_where(
            records,
            lambda r: field_value(r, "status") != "done"
            and _before(field_value(r, "due_date"), today),
        ),
        "high_priority": count_where(
            records, lambda r: field_value(r, "priority") in HIGH_PRIORITIES
        ),
    }


NOTES = CollectionSchema(
    name="notes",
    fields={
        "title": TEXT,
        "content": TEXT,
        "category": ENUM,
        "note_type": ENUM,
        "tags": ARRAY,
        "is_pinned": FLAG,
        "is_favorite": FLAG,
        "view_count": NUMBER,
        "created_at": DATE,
        "updated_at": DATE,
    },
    searchable=("title", "content", "category", "tags"),
    order_by=(SortKey("is_pinned"), SortKey("updated_at")),
    stats=note_stats,
    option_fields=("category", "tags"),
)

PEOPLE = CollectionSchema(
    name="people",
    fields={
        "name": TEXT,
        "profession": TEXT,
        "role": ENUM,
        "skills": ARRAY,
        "tags": ARRAY,
        "created_at": DATE,
    },
    searchable=("name", "profession", "skills", "tags"),
    order_by=(SortKey("created_at"),),
    stats=person_stats,
    option_fields=("role", "tags", "skills"),
)

SKILLS = CollectionSchema(
    name="skills",
    fields={
        "name": TEXT,
        "description": TEXT,
        "category": ENUM,
        "skill_type": ENUM,
        "level": ENUM,
        "difficulty": ENUM,
        "tags": ARRAY,
        "is_featured": FLAG,
        "progress": NUMBER,
        "practice_hours": NUMBER,
        "learning_since": DATE,
        "created_at": DATE,
    },
    searchable=("name", "description", "tags"),
    order_by=(SortKey("is_featured"), SortKey("practice_hours")),
    stats=skill_stats,
    option_fields=("tags",),
)

PROJECTS = CollectionSchema(
    name="projects",
    fields={
        "title": TEXT,
        "description": TEXT,
        "category": ENUM,
        "status": ENUM,
        "priority": ENUM,
        "tags": ARRAY,
        "tech_stack": ARRAY,
        "progress": NUMBER,
        "deadline": DATE,
        "created_at": DATE,
    },
    searchable=("title", "description", "tags", "tech_stack"),
    timeline_field="deadline",
    order_by=(SortKey("created_at"),),
    overdue_status=("status", "completed"),
    stats=project_stats,
    option_fields=("tags", "tech_stack"),
)

EVENTS = CollectionSchema(
    name="events",
    fields={
        "name": TEXT,
        "venue": TEXT,
        "organizer": TEXT,
        "event_type": ENUM,
        "tags": ARRAY,
        "is_online": FLAG,
        "is_featured": FLAG,
        "cost": NUMBER,
        "start_date": DATE,
        "created_at": DATE,
    },
    searchable=("name", "venue", "organizer", "tags"),
    timeline_field="start_date",
    order_by=(SortKey("is_featured"), SortKey("start_date")),
    stats=event_stats,
    option_fields=("tags", "start_date"),
)

TASKS = CollectionSchema(
    name="tasks",
    fields={
        "title": TEXT,
        "description": TEXT,
        "category": ENUM,
        "priority": ENUM,
        "status": ENUM,
        "tags": ARRAY,
        "is_featured": FLAG,
        "is_recurring": FLAG,
        "progress": NUMBER,
        "due_date": DATE,
        "created_at": DATE,
    },
    searchable=("title", "description", "tags"),
    timeline_field="due_date",
    order_by=(
        SortKey("priority", ranking=PRIORITY_RANKING),
        SortKey("due_date", descending=False),
    ),
    overdue_status=("status", "done"),
    stats=task_stats,
    option_fields=("tags",),
)

COLLECTIONS = {
    schema.name: schema for schema in (NOTES, PEOPLE, SKILLS, PROJECTS, EVENTS, TASKS)
}
