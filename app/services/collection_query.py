"""Client-side filter, search, sort and statistics over entity collections.

Everything in this module is pure: functions take an already-fetched
collection plus a declarative :class:`CollectionSchema` and return new lists
or plain values. Nothing here touches the database, and the input collection
is never mutated.

Records may be mappings (``{"title": ...}``) or objects exposing attributes
(ORM rows). Missing optional fields are treated as "not present": predicates
referencing them simply don't match.
"""

import enum
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)
from zoneinfo import ZoneInfo

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class FieldKind(str, enum.Enum):
    TEXT = "text"
    ENUM = "enum"
    FLAG = "flag"
    DATE = "date"
    ARRAY = "array"
    NUMBER = "number"


class TimelineWindow(str, enum.Enum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = True
    # explicit low-to-high order for enum fields; other values sort last
    ranking: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CollectionSchema:
    """Declarative description of one entity type's filterable fields."""

    name: str
    fields: Mapping[str, FieldKind]
    searchable: Tuple[str, ...]
    timeline_field: Optional[str] = None
    order_by: Tuple[SortKey, ...] = ()
    # (status field, value meaning "done") for the overdue window
    overdue_status: Optional[Tuple[str, str]] = None
    stats: Optional[Callable[[List[Any], datetime], Dict[str, Any]]] = None
    # fields whose distinct values feed the filter dropdowns
    option_fields: Tuple[str, ...] = ()

    def kind(self, name: str) -> FieldKind:
        try:
            return self.fields[name]
        except KeyError:
            raise ValueError(f"{self.name} has no filterable field '{name}'")

    def require(self, name: str, *kinds: FieldKind) -> None:
        kind = self.kind(name)
        if kind not in kinds:
            allowed = ", ".join(k.value for k in kinds)
            raise ValueError(
                f"{self.name}.{name} is a {kind.value} field, expected {allowed}"
            )


@dataclass(frozen=True)
class TimeRange:
    start: datetime
    end: datetime
    end_inclusive: bool = True

    def contains(self, moment: datetime) -> bool:
        if moment < self.start:
            return False
        return moment <= self.end if self.end_inclusive else moment < self.end


# ---------------------------------------------------------------------------
# Value access and normalisation
# ---------------------------------------------------------------------------


def field_value(record: Any, name: str) -> Any:
    """Read ``name`` from a mapping or an object, ``None`` when absent."""
    if isinstance(record, Mapping):
        value = record.get(name)
    else:
        value = getattr(record, name, None)
    if isinstance(value, enum.Enum):
        return value.value
    return value


def resolve_timezone(tz: Union[str, tzinfo, None]) -> tzinfo:
    if tz is None:
        return timezone.utc
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def current_time(tz: Union[str, tzinfo, None] = None) -> datetime:
    return datetime.now(resolve_timezone(tz))


def to_datetime(value: Any, tz: tzinfo) -> Optional[datetime]:
    """Coerce a date-ish value into an aware datetime in ``tz``.

    Returns ``None`` for empty or unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=tz)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def _aware(now: datetime, tz: Union[str, tzinfo, None] = None) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=resolve_timezone(tz))
    return now


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Timeline arithmetic
# ---------------------------------------------------------------------------


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def timeline_range(
    window: Union[TimelineWindow, str], now: datetime
) -> Optional[TimeRange]:
    """Range covered by a timeline window, ``None`` for ``all``.

    Weeks start on Sunday. ``overdue`` covers everything before today's
    midnight; the "not done" half of that rule lives in :class:`Timeline`.
    """
    window = TimelineWindow(window)
    now = _aware(now)
    today = _midnight(now)

    if window is TimelineWindow.ALL:
        return None
    if window is TimelineWindow.TODAY:
        return TimeRange(today, today + timedelta(days=1) - timedelta(milliseconds=1))
    if window is TimelineWindow.WEEK:
        # weekday(): Monday == 0 ... Sunday == 6
        week_start = today - timedelta(days=(today.weekday() + 1) % 7)
        return TimeRange(week_start, week_start + timedelta(days=7), end_inclusive=False)
    if window is TimelineWindow.MONTH:
        month_start = today.replace(day=1)
        if month_start.month == 12:
            next_month = month_start.replace(year=month_start.year + 1, month=1)
        else:
            next_month = month_start.replace(month=month_start.month + 1)
        month_end = (next_month - timedelta(days=1)).replace(hour=23, minute=59, second=59)
        return TimeRange(month_start, month_end)
    if window is TimelineWindow.YEAR:
        year_start = today.replace(month=1, day=1)
        year_end = today.replace(month=12, day=31, hour=23, minute=59, second=59)
        return TimeRange(year_start, year_end)
    # OVERDUE
    return TimeRange(EPOCH.astimezone(now.tzinfo), today, end_inclusive=False)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextSearch:
    """Case-insensitive substring match against any of ``fields``."""

    term: str
    fields: Tuple[str, ...]

    def matches(self, record: Any) -> bool:
        needle = self.term.lower()
        for name in self.fields:
            value = field_value(record, name)
            if value is None:
                continue
            if isinstance(value, (list, tuple, set)):
                if any(
                    needle in str(item).lower() for item in value if item is not None
                ):
                    return True
            elif needle in str(value).lower():
                return True
        return False


@dataclass(frozen=True)
class EnumMatch:
    field: str
    value: Any

    def matches(self, record: Any) -> bool:
        expected = self.value.value if isinstance(self.value, enum.Enum) else self.value
        return field_value(record, self.field) == expected


@dataclass(frozen=True)
class FlagFilter:
    field: str

    def matches(self, record: Any) -> bool:
        return field_value(record, self.field) is True


@dataclass(frozen=True)
class ContainsValue:
    """Exact membership in an array field (e.g. a tag chip)."""

    field: str
    value: Any

    def matches(self, record: Any) -> bool:
        values = field_value(record, self.field)
        if not isinstance(values, (list, tuple, set)):
            return False
        return self.value in values


@dataclass(frozen=True)
class YearMatch:
    field: str
    year: int
    tz: tzinfo = timezone.utc

    def matches(self, record: Any) -> bool:
        moment = to_datetime(field_value(record, self.field), self.tz)
        return moment is not None and moment.year == self.year


@dataclass(frozen=True)
class Timeline:
    field: str
    window: TimelineWindow
    now: datetime
    status_field: Optional[str] = None
    done_value: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "_range", timeline_range(self.window, self.now))

    def matches(self, record: Any) -> bool:
        if self._range is None:
            return True
        moment = to_datetime(field_value(record, self.field), self.now.tzinfo)
        if moment is None or not self._range.contains(moment):
            return False
        if self.window is TimelineWindow.OVERDUE and self.status_field:
            return field_value(record, self.status_field) != self.done_value
        return True


Predicate = Union[TextSearch, EnumMatch, FlagFilter, ContainsValue, YearMatch, Timeline]


# ---------------------------------------------------------------------------
# Engine operations
# ---------------------------------------------------------------------------


def _as_records(collection: Iterable[Any]) -> List[Any]:
    if collection is None or isinstance(collection, (str, bytes, Mapping)):
        raise TypeError("collection must be a sequence of records")
    return list(collection)


def filter_collection(
    collection: Iterable[Any], predicates: Sequence[Predicate] = ()
) -> List[Any]:
    """Keep the records matching every predicate, in their incoming order."""
    records = _as_records(collection)
    if not predicates:
        return records
    return [
        record
        for record in records
        if all(predicate.matches(record) for predicate in predicates)
    ]


def build_predicates(
    schema: CollectionSchema,
    *,
    search: Optional[str] = None,
    enums: Optional[Mapping[str, Any]] = None,
    flags: Iterable[str] = (),
    contains: Optional[Mapping[str, Any]] = None,
    year: Optional[int] = None,
    timeline: Union[TimelineWindow, str, None] = None,
    now: Optional[datetime] = None,
    tz: Union[str, tzinfo, None] = None,
) -> List[Predicate]:
    """Translate request parameters into predicates for ``schema``.

    Empty values are ignored. Fields the schema does not declare with the
    right kind raise ``ValueError``.
    """
    zone = resolve_timezone(tz)
    now = _aware(now, zone) if now else current_time(zone)
    predicates: List[Predicate] = []

    if search:
        predicates.append(TextSearch(search, schema.searchable))

    for name, value in (enums or {}).items():
        if value is None or value == "":
            continue
        schema.require(name, FieldKind.ENUM)
        predicates.append(EnumMatch(name, value))

    for name in flags:
        schema.require(name, FieldKind.FLAG)
        predicates.append(FlagFilter(name))

    for name, value in (contains or {}).items():
        if value is None or value == "":
            continue
        schema.require(name, FieldKind.ARRAY)
        predicates.append(ContainsValue(name, value))

    if year is not None:
        if not schema.timeline_field:
            raise ValueError(f"{schema.name} has no date field to filter by year")
        predicates.append(YearMatch(schema.timeline_field, int(year), now.tzinfo))

    if timeline is not None and TimelineWindow(timeline) is not TimelineWindow.ALL:
        window = TimelineWindow(timeline)
        if not schema.timeline_field:
            raise ValueError(f"{schema.name} has no date field for timeline filters")
        status_field = done_value = None
        if window is TimelineWindow.OVERDUE:
            if not schema.overdue_status:
                raise ValueError(f"{schema.name} does not support the overdue filter")
            status_field, done_value = schema.overdue_status
        predicates.append(
            Timeline(
                schema.timeline_field,
                window,
                now,
                status_field=status_field,
                done_value=done_value,
            )
        )

    return predicates


def _sort_value(record: Any, key: SortKey, kind: Optional[FieldKind], tz: tzinfo):
    value = field_value(record, key.field)
    if key.ranking:
        if isinstance(value, enum.Enum):
            value = value.value
        return key.ranking.index(value) if value in key.ranking else None
    if kind is FieldKind.DATE:
        return to_datetime(value, tz)
    if kind is FieldKind.FLAG:
        return bool(value)
    return value


def sort_collection(
    collection: Iterable[Any],
    schema: CollectionSchema,
    tz: Union[str, tzinfo, None] = None,
) -> List[Any]:
    """Apply the schema's default ordering. Missing values sort last."""
    zone = resolve_timezone(tz)
    records = _as_records(collection)

    # Stable sorts from the least to the most significant key
    for key in reversed(schema.order_by):
        kind = schema.fields.get(key.field)
        present, missing = [], []
        for record in records:
            value = _sort_value(record, key, kind, zone)
            (missing if value is None else present).append((value, record))
        present.sort(key=lambda pair: pair[0], reverse=key.descending)
        records = [record for _, record in present] + [record for _, record in missing]
    return records


def compute_stats(
    collection: Iterable[Any],
    schema: CollectionSchema,
    now: Optional[datetime] = None,
    tz: Union[str, tzinfo, None] = None,
) -> Dict[str, Any]:
    """Aggregate statistics over the full, unfiltered collection."""
    records = _as_records(collection)
    zone = resolve_timezone(tz)
    now = _aware(now, zone) if now else current_time(zone)
    if schema.stats is None:
        return {"total": len(records)}
    return schema.stats(records, now)


def distinct_values(
    collection: Iterable[Any],
    name: str,
    schema: Optional[CollectionSchema] = None,
    tz: Union[str, tzinfo, None] = None,
) -> List[Any]:
    """Values actually present for ``name``, deduplicated and sorted.

    Array fields are flattened; date fields yield their year component.
    """
    zone = resolve_timezone(tz)
    kind = schema.kind(name) if schema else None
    seen = set()

    for record in _as_records(collection):
        value = field_value(record, name)
        if kind is FieldKind.DATE:
            moment = to_datetime(value, zone)
            if moment is not None:
                seen.add(moment.year)
            continue
        if isinstance(value, (list, tuple, set)):
            seen.update(item for item in value if item not in (None, ""))
        elif value not in (None, ""):
            seen.add(value)

    return sorted(seen, key=lambda v: (str(type(v)), v))


# ---------------------------------------------------------------------------
# Reduction helpers used by the per-entity stats functions
# ---------------------------------------------------------------------------


def count_where(records: Sequence[Any], predicate: Callable[[Any], bool]) -> int:
    return sum(1 for record in records if predicate(record))


def sum_field(records: Sequence[Any], name: str) -> float:
    return sum((field_value(record, name) or 0) for record in records)


def average_field(records: Sequence[Any], name: str) -> int:
    if not records:
        return 0
    return round_half_up(sum_field(records, name) / len(records))


def value_counts(records: Sequence[Any], name: str) -> Dict[Any, int]:
    counts: Dict[Any, int] = {}
    for record in records:
        value = field_value(record, name)
        items = value if isinstance(value, (list, tuple, set)) else [value]
        for item in items:
            if item in (None, ""):
                continue
            counts[item] = counts.get(item, 0) + 1
    return counts


@dataclass
class QueryResult:
    items: List[Any]
    total: int
    filtered_total: int
    stats: Dict[str, Any]
    filter_options: Dict[str, List[Any]]


def query_collection(
    collection: Iterable[Any],
    schema: CollectionSchema,
    predicates: Sequence[Predicate] = (),
    skip: int = 0,
    limit: Optional[int] = None,
    now: Optional[datetime] = None,
    tz: Union[str, tzinfo, None] = None,
) -> QueryResult:
    """Sort, filter and page a collection; stats and options use all of it."""
    records = sort_collection(collection, schema, tz)
    filtered = filter_collection(records, predicates)
    end = skip + limit if limit is not None else None
    return QueryResult(
        items=filtered[skip:end],
        total=len(records),
        filtered_total=len(filtered),
        stats=compute_stats(records, schema, now=now, tz=tz),
        filter_options={
            name: distinct_values(records, name, schema, tz)
            for name in schema.option_fields
        },
    )
