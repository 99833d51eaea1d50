"""Transaction model consumed from the transaction store."""

from datetime import date as date_type, datetime
from typing import Any, Iterable, List, Literal, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

TransactionKind = Literal["income", "expense"]


class Transaction(BaseModel):
    """
    A single historical transaction.

    Read-only to the analytics core. Rows coming from the store may use
    either ``kind`` or ``type`` for the income/expense discriminator.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    kind: TransactionKind = Field(validation_alias=AliasChoices("kind", "type"))
    category: str
    amount: float = Field(..., ge=0)
    date: date_type
    timestamp: Optional[datetime] = None
    note: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        if v is None:
            raise ValueError("id is required")
        return str(v)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        # Stores hand back either dates, datetimes or ISO strings
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and len(v) > 10:
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        return v

    @property
    def is_expense(self) -> bool:
        return self.kind == "expense"

    @property
    def month(self) -> str:
        """Calendar month key, ``YYYY-MM``."""
        return self.date.strftime("%Y-%m")


def parse_transactions(rows: Iterable[Union[Transaction, Mapping[str, Any]]]) -> List[Transaction]:
    """Validate raw store rows into Transactions; raises ValidationError on malformed rows."""
    return [
        row if isinstance(row, Transaction) else Transaction.model_validate(row)
        for row in rows
    ]
