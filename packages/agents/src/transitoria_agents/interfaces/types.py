"""Request types sent to the classification agent.

Only the fields the model needs travel to the LLM: id, booking date,
description, amount and relation. The batch remembers which ids it was
built from so a late response can be recognised as stale.
"""

import datetime
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from transitoria_core.models import Transaction


class TransactionDigest(BaseModel):
    """The part of a transaction shown to the classifier."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: datetime.date
    description: str = ""
    amount: Decimal
    relation: Optional[str] = None

    @classmethod
    def from_transaction(cls, txn: Transaction) -> "TransactionDigest":
        return cls(
            id=txn.id,
            date=txn.date,
            description=txn.description,
            amount=txn.amount,
            relation=txn.relation,
        )

    def as_prompt_line(self) -> str:
        """``ID|Date|Description|Amount|Relation`` with pipes removed from text."""
        description = self.description.replace("|", "/").replace("\n", " ")
        relation = (self.relation or "").replace("|", "/")
        return f"{self.id}|{self.date.isoformat()}|{description}|{self.amount}|{relation}"


class ClassificationBatch(BaseModel):
    """One classification request covering a snapshot of the store."""

    model_config = ConfigDict(frozen=True)

    transactions: list[TransactionDigest] = Field(default_factory=list)

    @computed_field
    @property
    def batch_ids(self) -> frozenset[str]:
        """Ids of the transactions in the request."""
        return frozenset(t.id for t in self.transactions)

    @classmethod
    def from_transactions(cls, transactions: Iterable[Transaction]) -> "ClassificationBatch":
        return cls(transactions=[TransactionDigest.from_transaction(t) for t in transactions])

    def __len__(self) -> int:
        return len(self.transactions)


__all__ = [
    "TransactionDigest",
    "ClassificationBatch",
]
