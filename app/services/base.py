import enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from uuid import UUID

import structlog
from pydantic import BaseModel
from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.services.collection_query import (
    CollectionSchema,
    Predicate,
    QueryResult,
    query_collection,
)
from app.utils.validation import validate_and_raise

logger = structlog.get_logger(__name__)


class OwnedRecordService:
    """CRUD for records owned by a single user, plus collection listing.

    Subclasses set ``model`` and ``schema`` and may override ``_prepare`` to
    derive fields (completion timestamps, cleared recurrence, ...) before a
    write.
    """

    model = None
    schema: CollectionSchema = None
    required_fields: Tuple[str, ...] = ()
    url_fields: Tuple[str, ...] = ()

    @property
    def entity(self) -> str:
        return self.model.__name__

    @staticmethod
    def _values(data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
        if isinstance(data, BaseModel):
            values = data.model_dump(exclude_unset=True)
        else:
            values = dict(data)
        return {
            key: value.value if isinstance(value, enum.Enum) else value
            for key, value in values.items()
        }

    def _validate(self, values: Dict[str, Any], creating: bool) -> None:
        required = [
            field for field in self.required_fields if creating or field in values
        ]
        urls = [field for field in self.url_fields if values.get(field)]
        validate_and_raise(values, required=required, urls=urls)

    def _prepare(self, values: Dict[str, Any], record=None) -> Dict[str, Any]:
        return values

    async def _load(self, db: AsyncSession, record_id: int):
        """Re-read a row so server-side defaults are populated."""
        result = await db.execute(
            select(self.model)
            .where(self.model.id == record_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def create(
        self, db: AsyncSession, data: Union[BaseModel, Dict[str, Any]], user_id: int
    ):
        values = self._values(data)
        self._validate(values, creating=True)
        values = self._prepare(values)

        try:
            record = self.model(**values, user_id=user_id)
            db.add(record)
            await db.commit()
            record = await self._load(db, record.id)

            logger.info(
                "Record created successfully",
                entity=self.entity,
                record_uuid=record.uuid,
                user_id=user_id,
            )
            return record

        except IntegrityError as e:
            await db.rollback()
            logger.error(
                "Failed to create record due to integrity constraint",
                entity=self.entity,
                user_id=user_id,
                error=str(e),
            )
            raise ValueError(f"{self.entity} could not be created")
        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to create record",
                entity=self.entity,
                user_id=user_id,
                error=str(e),
            )
            raise

    async def get(self, db: AsyncSession, record_uuid: UUID, user_id: int):
        result = await db.execute(
            select(self.model).where(
                and_(self.model.uuid == record_uuid, self.model.user_id == user_id)
            )
        )
        record = result.scalar_one_or_none()

        if not record:
            logger.warning(
                "Record not found",
                entity=self.entity,
                record_uuid=record_uuid,
                user_id=user_id,
            )
        return record

    async def get_by_id(self, db: AsyncSession, record_id: Optional[int], user_id: int):
        """Lookup by primary key; a missing or dangling id yields None."""
        if record_id is None:
            return None
        result = await db.execute(
            select(self.model).where(
                and_(self.model.id == record_id, self.model.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    async def get_all(self, db: AsyncSession, user_id: int) -> List[Any]:
        try:
            result = await db.execute(
                select(self.model)
                .where(self.model.user_id == user_id)
                .order_by(self.model.id)
            )
            return list(result.scalars().all())

        except Exception as e:
            logger.error(
                "Failed to get records",
                entity=self.entity,
                user_id=user_id,
                error=str(e),
            )
            raise

    async def query(
        self,
        db: AsyncSession,
        user_id: int,
        predicates: Sequence[Predicate] = (),
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> QueryResult:
        """Fetch the whole collection, then filter, sort and page it in memory."""
        records = await self.get_all(db, user_id)
        result = query_collection(
            records,
            self.schema,
            predicates,
            skip=skip,
            limit=limit,
            tz=settings.TIMEZONE,
        )

        logger.info(
            "Retrieved records",
            entity=self.entity,
            total=result.total,
            filtered_total=result.filtered_total,
            skip=skip,
            limit=limit,
            user_id=user_id,
        )
        return result

    async def update(
        self,
        db: AsyncSession,
        record_uuid: UUID,
        data: Union[BaseModel, Dict[str, Any]],
        user_id: int,
    ):
        record = await self.get(db, record_uuid, user_id)
        if not record:
            return None

        values = self._values(data)
        self._validate(values, creating=False)
        values = self._prepare(values, record)

        try:
            for key, value in values.items():
                setattr(record, key, value)
            await db.commit()
            record = await self._load(db, record.id)

            logger.info(
                "Record updated successfully",
                entity=self.entity,
                record_uuid=record_uuid,
                user_id=user_id,
                updated_fields=list(values.keys()),
            )
            return record

        except IntegrityError as e:
            await db.rollback()
            logger.error(
                "Failed to update record due to integrity constraint",
                entity=self.entity,
                record_uuid=record_uuid,
                error=str(e),
            )
            raise ValueError("Update failed due to constraint violation")
        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to update record",
                entity=self.entity,
                record_uuid=record_uuid,
                error=str(e),
            )
            raise

    async def delete(self, db: AsyncSession, record_uuid: UUID, user_id: int) -> bool:
        record = await self.get(db, record_uuid, user_id)
        if not record:
            return False

        try:
            await self._delete_dependents(db, record)
            await db.delete(record)
            await db.commit()

            logger.info(
                "Record deleted",
                entity=self.entity,
                record_uuid=record_uuid,
                user_id=user_id,
            )
            return True

        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to delete record",
                entity=self.entity,
                record_uuid=record_uuid,
                error=str(e),
            )
            raise

    async def _delete_dependents(self, db: AsyncSession, record) -> None:
        """Remove rows that reference ``record`` without an ORM cascade."""
