"""
Read-only access to the transaction store.

The analytics core only ever asks for "transactions between two dates";
anything else about persistence belongs to the owning service.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import selectinload

from spendsmart_ai.db import models
from spendsmart_ai.db.database import get_session_factory
from spendsmart_ai.schemas.transaction import Transaction

logger = logging.getLogger(__name__)

KIND_BY_TYPE = {
    models.TRANSACTION_TYPE_INCOME: "income",
    models.TRANSACTION_TYPE_EXPENSE: "expense",
}


class TransactionStore(Protocol):
    async def fetch_by_date_range(
        self, start_date: str, end_date: str
    ) -> Sequence[Union[Transaction, Mapping[str, Any]]]:
        """Transactions dated within ``[start_date, end_date]`` (ISO ``YYYY-MM-DD``), any order."""
        ...


def build_date_range_query(start_date: str, end_date: str) -> Select:
    start = datetime.combine(date.fromisoformat(start_date), datetime.min.time())
    end = datetime.combine(date.fromisoformat(end_date) + timedelta(days=1), datetime.min.time())
    return (
        select(models.Transaction)
        .options(selectinload(models.Transaction.Category))
        .where(models.Transaction.Date >= start)
        .where(models.Transaction.Date < end)
    )


def to_row(record: models.Transaction) -> Dict[str, Any]:
    """Map an ORM row onto the Transaction field names; validation happens downstream."""
    category = record.Category.Name if record.Category is not None else "Uncategorized"
    return {
        "id": str(record.Id),
        "kind": KIND_BY_TYPE.get(record.Type, record.Type),
        "category": category,
        "amount": float(record.Amount) if record.Amount is not None else None,
        "date": record.Date,
        "timestamp": record.CreatedOn,
        "note": record.Notes,
    }


class SqlTransactionStore:
    """TransactionStore backed by the SQLAlchemy ``Transactions`` table."""

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self._session_factory = session_factory

    async def fetch_by_date_range(self, start_date: str, end_date: str) -> List[Dict[str, Any]]:
        session_factory = self._session_factory or get_session_factory()
        async with session_factory() as session:
            result = await session.execute(build_date_range_query(start_date, end_date))
            records = result.scalars().all()

        logger.info(f"Fetched {len(records)} transactions between {start_date} and {end_date}")
        return [to_row(record) for record in records]
