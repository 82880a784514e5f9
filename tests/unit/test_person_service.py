"""Unit tests for the person service, including CSV import and export."""

import base64
import csv
import io

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import RecordValidationError
from app.models.person import Person
from app.models.user import User
from app.schemas.person import PersonContacts, PersonCreate, PersonCSVImport
from app.services.event import event_service
from app.services.person import EXPORT_COLUMNS, person_service


def encode_csv(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class TestPersonService:
    """Test Person service functionality."""

    async def test_create_person_cleans_contacts(
        self, db: AsyncSession, sample_user: User
    ):
        person = await person_service.create(
            db,
            PersonCreate(
                name="Grace",
                contacts=PersonContacts(github=" grace ", email="", phone=None),
            ),
            sample_user.id,
        )

        assert person.contacts == {"github": "grace"}

    async def test_create_person_rejects_bad_email(
        self, db: AsyncSession, sample_user: User
    ):
        with pytest.raises(RecordValidationError, match="email"):
            await person_service.create(
                db,
                PersonCreate(name="Grace", contacts=PersonContacts(email="nope")),
                sample_user.id,
            )

    async def test_search_people(self, db: AsyncSession, sample_user: User):
        from app.services.collection_query import build_predicates
        from app.services.collections import PEOPLE

        await person_service.create(db, {"name": "Ada", "tags": ["iot"]}, sample_user.id)
        await person_service.create(db, {"name": "Bo", "tags": ["web"]}, sample_user.id)

        for term in ("iot", "ada"):
            result = await person_service.query(
                db, sample_user.id, build_predicates(PEOPLE, search=term)
            )
            assert [p.name for p in result.items] == ["Ada"]

    async def test_delete_person_removes_attendance(
        self, db: AsyncSession, sample_person: Person, sample_event, sample_user: User
    ):
        await event_service.add_attendee(
            db, sample_event.uuid, sample_person.uuid, sample_user.id
        )

        assert await person_service.delete(db, sample_person.uuid, sample_user.id)

        event = await event_service.get(db, sample_event.uuid, sample_user.id)
        await db.refresh(event)
        assert event.attendee_count == 0


class TestPersonCSV:
    """Test CSV import and export."""

    async def test_import_people(self, db: AsyncSession, sample_user: User):
        content = (
            "Name,Profession,Role,Skills,Tags,Email,GitHub\n"
            "Linus,Kernel hacker,Mentor,\"C, Git\",oss,linus@example.com,torvalds\n"
            ",Nobody,,,,,\n"
            "Bad Mail,,,,,not-an-email,\n"
        )

        result = await person_service.import_people_from_csv(
            db, sample_user.id, PersonCSVImport(file_data=encode_csv(content))
        )

        assert result.success == 1
        assert result.failed == 2
        assert result.errors == [
            "Row 3: Name is required",
            "Row 4 (Bad Mail): Invalid email format",
        ]

        people = await person_service.get_all(db, sample_user.id)
        assert len(people) == 1
        assert people[0].skills == ["C", "Git"]
        assert people[0].contacts == {"github": "torvalds", "email": "linus@example.com"}

    async def test_import_skips_duplicates(
        self, db: AsyncSession, sample_person: Person, sample_user: User
    ):
        content = "name,email\nADA LOVELACE,\nSomeone,ada@example.com\nNew Person,\n"

        result = await person_service.import_people_from_csv(
            db, sample_user.id, PersonCSVImport(file_data=encode_csv(content))
        )

        assert result.success == 1
        assert result.duplicates == 2
        assert [d["row"] for d in result.duplicate_records] == [2, 3]

    async def test_import_keeps_duplicates_when_asked(
        self, db: AsyncSession, sample_person: Person, sample_user: User
    ):
        content = "name\nAda Lovelace\n"

        result = await person_service.import_people_from_csv(
            db,
            sample_user.id,
            PersonCSVImport(file_data=encode_csv(content), skip_duplicates=False),
        )

        assert result.success == 1
        assert result.duplicates == 1
        assert len(await person_service.get_all(db, sample_user.id)) == 2

    async def test_import_empty_file(self, db: AsyncSession, sample_user: User):
        with pytest.raises(ValueError, match="empty"):
            await person_service.import_people_from_csv(
                db, sample_user.id, PersonCSVImport(file_data=encode_csv("name,email\n"))
            )

    async def test_import_invalid_base64(self, db: AsyncSession, sample_user: User):
        with pytest.raises(ValueError):
            await person_service.import_people_from_csv(
                db, sample_user.id, PersonCSVImport(file_data="%%%")
            )

    async def test_export_people(
        self, db: AsyncSession, sample_person: Person, sample_user: User
    ):
        await person_service.create(db, {"name": "Bo", "role": "Friend"}, sample_user.id)

        content = await person_service.export_people_to_csv(
            db, sample_user.id, role="Mentor"
        )

        rows = list(csv.DictReader(io.StringIO(content)))
        assert len(rows) == 1
        assert rows[0]["name"] == "Ada Lovelace"
        assert rows[0]["email"] == "ada@example.com"
        assert rows[0]["tags"] == "iot"
        assert list(rows[0].keys()) == list(EXPORT_COLUMNS)

    async def test_exported_file_imports_cleanly(
        self, db: AsyncSession, sample_person: Person, sample_user: User, other_user: User
    ):
        content = await person_service.export_people_to_csv(db, sample_user.id)

        result = await person_service.import_people_from_csv(
            db, other_user.id, PersonCSVImport(file_data=encode_csv(content))
        )

        assert result.success == 1
        imported = (await person_service.get_all(db, other_user.id))[0]
        assert imported.contacts == sample_person.contacts

    def test_import_template(self):
        rows = list(csv.DictReader(io.StringIO(person_service.import_template())))

        assert len(rows) == 2
        assert rows[0]["name"] == "Jane Doe"
        assert rows[1]["email"] == ""
