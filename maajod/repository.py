"""
Repository interfaces for the ledger and the tenancy graph.

The access resolver and the aggregation engine only talk to these
interfaces. ``maajod.adapters.sql`` backs the running service with
SQLAlchemy; ``maajod.adapters.memory`` keeps everything in lists and is
used by the unit tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional


@dataclass
class NewTransaction:
    store_id: str
    type: str
    amount: Decimal
    date: datetime
    category: Optional[str] = None
    note: str = ""


class TransactionRepository(ABC):

    @abstractmethod
    def create(self, entry: NewTransaction):
        """Persist a ledger entry and return the stored record."""

    @abstractmethod
    def find_by_date_range(self, store_id: str, start: datetime, end: datetime) -> List:
        """
        Entries of one store with ``start <= date <= end``, newest first.

        Ordering is ``date`` descending, then ``created_at`` descending.
        """

    @abstractmethod
    def delete(self, transaction_id: str, store_id: str):
        """
        Delete an entry only if it belongs to ``store_id``.

        Returns the deleted record, or None when no entry with that id
        exists in that store.
        """

    @abstractmethod
    def aggregate_by_date_range(self, store_id: str, start: datetime, end: datetime) -> Dict[str, Decimal]:
        """Sum of ``amount`` per transaction type; types with no rows are absent."""


class MembershipRepository(ABC):

    @abstractmethod
    def find(self, user_id: str, store_id: str):
        """The membership row for (user, store), or None."""

    @abstractmethod
    def find_default(self, user_id: str):
        """The user's membership flagged as default, or None."""

    @abstractmethod
    def find_first(self, user_id: str):
        """The user's earliest membership (by creation time, then id), or None."""
