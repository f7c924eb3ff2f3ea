"""SQLAlchemy implementation of QualificationRepository."""

import json
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from qualdesk.core.exceptions import NotFoundError, PermissionDeniedError, UnavailableError
from qualdesk.domain.models import Amount, Qualification
from qualdesk.repositories.sqlalchemy.orm_models import QualificationORM

logger = logging.getLogger(__name__)


class SqlAlchemyQualificationRepository:
    """
    SQLAlchemy-backed qualification store.

    Each call opens its own session. Deleting a record owned by someone else
    than owner_id (when the repository is scoped to an owner) is refused.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        owner_id: Optional[str] = None,
    ):
        self._session_factory = session_factory
        self._owner_id = owner_id

    async def list_by_owner(self, owner_id: str) -> list[Qualification]:
        """List qualifications for an owner, most recently modified first."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(QualificationORM)
                    .where(QualificationORM.owner_id == owner_id)
                    .order_by(QualificationORM.last_modified_at.desc())
                )
                return [self._to_domain(row) for row in result.scalars().all()]
        except OperationalError as e:
            raise UnavailableError(f"Could not list qualifications: {e.orig}") from e

    async def get_by_id(self, qualification_id: str) -> Optional[Qualification]:
        async with self._session_factory() as session:
            orm_q = await session.get(QualificationORM, qualification_id)
            return self._to_domain(orm_q) if orm_q else None

    async def create(self, qualification: Qualification) -> Qualification:
        """Persist a new qualification."""
        async with self._session_factory() as session:
            orm_q = self._to_orm(qualification)
            session.add(orm_q)
            await session.commit()
            return self._to_domain(orm_q)

    async def delete(self, qualification_id: str) -> None:
        try:
            async with self._session_factory() as session:
                orm_q = await session.get(QualificationORM, qualification_id)
                if orm_q is None:
                    raise NotFoundError("Qualification", qualification_id)
                if self._owner_id is not None and orm_q.owner_id != self._owner_id:
                    raise PermissionDeniedError("Qualification", qualification_id)
                await session.delete(orm_q)
                await session.commit()
        except OperationalError as e:
            raise UnavailableError(f"Could not delete qualification: {e.orig}") from e
        logger.debug("Deleted qualification %s", qualification_id)

    @staticmethod
    def _to_domain(orm_q: QualificationORM) -> Qualification:
        factors = json.loads(orm_q.factors_json) if orm_q.factors_json else {}
        return Qualification(
            qualification_id=orm_q.qualification_id,
            owner_id=orm_q.owner_id,
            instrument_type=orm_q.instrument_type,
            market=orm_q.market,
            period=orm_q.period,
            amount=Amount(
                value=Decimal(str(orm_q.amount_value)),
                currency=orm_q.amount_currency,
            ),
            unregistered=bool(orm_q.unregistered),
            factors={key: Decimal(value) for key, value in factors.items()},
            taxpayer_id=orm_q.taxpayer_id,
            contributor_id=orm_q.contributor_id,
            qualification_type=orm_q.qualification_type,
            created_at=orm_q.created_at,
            last_modified_at=orm_q.last_modified_at,
        )

    @staticmethod
    def _to_orm(qualification: Qualification) -> QualificationORM:
        return QualificationORM(
            qualification_id=qualification.qualification_id,
            owner_id=qualification.owner_id,
            instrument_type=qualification.instrument_type,
            market=qualification.market,
            period=qualification.period,
            amount_value=qualification.amount.value,
            amount_currency=qualification.amount.currency,
            unregistered=qualification.unregistered,
            factors_json=json.dumps(
                {key: str(value) for key, value in qualification.factors.items()}
            ),
            taxpayer_id=qualification.taxpayer_id,
            contributor_id=qualification.contributor_id,
            qualification_type=qualification.qualification_type,
            created_at=qualification.created_at,
            last_modified_at=qualification.last_modified_at,
        )
