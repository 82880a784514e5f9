import base64
import csv
import io
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import RecordValidationError
from app.models.event import EventAttendee
from app.models.person import CONTACT_FIELDS, Person
from app.schemas.person import PersonCSVImport, PersonImportResult
from app.services.base import OwnedRecordService
from app.services.collection_query import build_predicates, filter_collection
from app.services.collections import PEOPLE
from app.utils.validation import parse_comma_separated, validate_email_format

logger = structlog.get_logger(__name__)

PROFILE_FIELDS = ("name", "profession", "role", "skills", "tags")
EXPORT_COLUMNS = PROFILE_FIELDS + CONTACT_FIELDS + ("notes",)

TEMPLATE_ROWS = [
    {
        "name": "Jane Doe",
        "profession": "Backend Engineer",
        "role": "Mentor",
        "skills": "Python, PostgreSQL",
        "tags": "Tech, Community",
        "email": "jane@example.com",
        "github": "janedoe",
        "notes": "Met at PyCon",
    },
    {
        "name": "John Smith",
        "profession": "Designer",
        "role": "Friend",
        "skills": "Figma",
        "tags": "Design",
        "whatsapp": "+628123456789",
    },
]


def _clean_contacts(contacts: Optional[Dict[str, Any]]) -> Optional[Dict[str, str]]:
    if not contacts:
        return None
    cleaned = {
        key: str(value).strip()
        for key, value in contacts.items()
        if key in CONTACT_FIELDS and value is not None and str(value).strip()
    }
    return cleaned or None


def _is_duplicate(existing: List[Dict[str, Any]], name: str, contacts: Dict[str, str]):
    """Same name (case-insensitive) or same phone, email or whatsapp."""
    lowered = name.lower()
    for person in existing:
        if person["name"].lower() == lowered:
            return True
        known = person["contacts"] or {}
        for field in ("phone", "email", "whatsapp"):
            if contacts.get(field) and known.get(field) == contacts[field]:
                return True
    return False


class PersonService(OwnedRecordService):
    """Service layer for the people in a user's network."""

    model = Person
    schema = PEOPLE
    required_fields = ("name",)

    def _prepare(self, values: Dict[str, Any], record=None) -> Dict[str, Any]:
        if "contacts" in values:
            contacts = _clean_contacts(values["contacts"])
            if contacts and not validate_email_format(contacts.get("email")):
                raise RecordValidationError(["contacts.email must be a valid email address"])
            values["contacts"] = contacts
        return values

    async def _delete_dependents(self, db: AsyncSession, record) -> None:
        await db.execute(delete(EventAttendee).where(EventAttendee.person_id == record.id))

    async def import_people_from_csv(
        self, db: AsyncSession, user_id: int, import_data: PersonCSVImport
    ) -> PersonImportResult:
        """Import people from base64 encoded CSV data.

        Rows are numbered as in a spreadsheet, the header being row 1.
        Duplicates are checked against the people stored before the import.
        """
        try:
            csv_content = base64.b64decode(import_data.file_data).decode("utf-8-sig")
        except ValueError as e:
            raise ValueError("File is not valid base64 encoded UTF-8 CSV") from e

        reader = csv.DictReader(io.StringIO(csv_content))
        if reader.fieldnames:
            reader.fieldnames = [header.strip().lower() for header in reader.fieldnames]
        rows = list(reader)

        if not rows:
            raise ValueError("File is empty or invalid format")
        if len(rows) > settings.MAX_IMPORT_ROWS:
            raise ValueError(
                f"File has {len(rows)} rows, the limit is {settings.MAX_IMPORT_ROWS}"
            )

        existing = [
            {"name": person.name, "contacts": person.contacts}
            for person in await self.get_all(db, user_id)
        ]
        result = PersonImportResult()

        try:
            for row_num, row in enumerate(rows, start=2):
                values = {
                    key: (value or "").strip()
                    for key, value in row.items()
                    if isinstance(key, str)
                }

                name = values.get("name")
                if not name:
                    result.failed += 1
                    result.errors.append(f"Row {row_num}: Name is required")
                    continue

                email = values.get("email")
                if email and not validate_email_format(email):
                    result.failed += 1
                    result.errors.append(f"Row {row_num} ({name}): Invalid email format")
                    continue

                contacts = _clean_contacts({f: values.get(f) for f in CONTACT_FIELDS}) or {}

                if _is_duplicate(existing, name, contacts):
                    result.duplicates += 1
                    result.duplicate_records.append({"row": row_num, "name": name})
                    if import_data.skip_duplicates:
                        continue

                db.add(
                    Person(
                        user_id=user_id,
                        name=name,
                        profession=values.get("profession") or None,
                        role=values.get("role") or None,
                        skills=parse_comma_separated(values.get("skills")) or None,
                        tags=parse_comma_separated(values.get("tags")) or None,
                        contacts=contacts or None,
                        notes=values.get("notes") or None,
                    )
                )
                result.success += 1

            await db.commit()

            logger.info(
                "CSV import completed",
                user_id=user_id,
                total_records=len(rows),
                imported_records=result.success,
                failed_records=result.failed,
                duplicate_records=result.duplicates,
            )
            return result

        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to import people from CSV", user_id=user_id, error=str(e)
            )
            raise

    async def export_people_to_csv(
        self,
        db: AsyncSession,
        user_id: int,
        role: Optional[str] = None,
        tag: Optional[str] = None,
        skill: Optional[str] = None,
    ) -> str:
        """Render the user's people as CSV, in the import column layout."""
        people = await self.get_all(db, user_id)
        predicates = build_predicates(
            PEOPLE,
            enums={"role": role},
            contains={"tags": tag, "skills": skill},
            tz=settings.TIMEZONE,
        )
        people = filter_collection(people, predicates)

        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        for person in people:
            row = {
                "name": person.name,
                "profession": person.profession or "",
                "role": person.role or "",
                "skills": ", ".join(person.skills or []),
                "tags": ", ".join(person.tags or []),
                "notes": person.notes or "",
            }
            for field in CONTACT_FIELDS:
                row[field] = person.contact(field) or ""
            writer.writerow(row)

        logger.info("People exported", user_id=user_id, count=len(people))
        return output.getvalue()

    @staticmethod
    def import_template() -> str:
        """Empty import sheet with two example rows."""
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=EXPORT_COLUMNS, restval="")
        writer.writeheader()
        writer.writerows(TEMPLATE_ROWS)
        return output.getvalue()


person_service = PersonService()
