"""
Waste log store

Append-only log of WasteRecords partitioned by owner. Callers obtain a store
handle from get_store() and use it inside a ``with`` block; a store that is
not open refuses every operation with StoreUnavailable.

Two implementations are provided:
- DjangoWasteLogStore: backed by the Django ORM (the default)
- InMemoryWasteLogStore: process-local, for tests and demonstrations
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import DatabaseError, connection, transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from .exceptions import StoreUnavailable, Unauthorized
from .models import WasteRecord

logger = logging.getLogger(__name__)

DEFAULT_STORE = 'wastelog.store.DjangoWasteLogStore'


class WasteLogStore(ABC):
    """
    Repository interface for saved calculations

    Subclasses implement _append() and _list_by_owner(); this base class
    handles the open/closed lifecycle and the owner precondition.
    """

    def __init__(self, clock=None):
        """
        Args:
            clock: Callable returning the aware datetime used for created_at
                (defaults to django.utils.timezone.now)
        """
        self.clock = clock or timezone.now
        self.is_open = False

    def open(self):
        self.is_open = True
        return self

    def close(self):
        self.is_open = False

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _check_ready(self, owner_id):
        if not self.is_open:
            raise StoreUnavailable('Waste log store is not open')
        if owner_id is None:
            raise Unauthorized()

    def append(self, owner_id, evaluation):
        """
        Store one evaluated calculation for owner_id

        Args:
            owner_id: Resolved owner (user primary key)
            evaluation: evaluator.Evaluation

        Returns:
            The stored WasteRecord with id and created_at assigned

        Raises:
            Unauthorized: if there is no resolved owner
            StoreUnavailable: if persistence fails
        """
        self._check_ready(owner_id)
        return self._append(owner_id, evaluation)

    def list_by_owner(self, owner_id):
        """
        All records of owner_id, newest first (later insert first on ties)

        Returns an empty list if the owner has no records.
        """
        self._check_ready(owner_id)
        return self._list_by_owner(owner_id)

    @abstractmethod
    def _append(self, owner_id, evaluation):
        raise NotImplementedError

    @abstractmethod
    def _list_by_owner(self, owner_id):
        raise NotImplementedError


class DjangoWasteLogStore(WasteLogStore):
    """Store backed by the WasteRecord table"""

    def open(self):
        try:
            connection.ensure_connection()
        except DatabaseError as e:
            raise StoreUnavailable() from e
        return super().open()

    def _owner_exists(self, owner_id):
        User = get_user_model()
        return User.objects.filter(pk=owner_id, is_active=True).exists()

    def _append(self, owner_id, evaluation):
        try:
            with transaction.atomic():
                if not self._owner_exists(owner_id):
                    raise Unauthorized('Unknown or inactive owner')
                record = WasteRecord(
                    owner_id=owner_id,
                    created_at=self.clock(),
                    **evaluation.as_fields()
                )
                record.save()
        except DatabaseError as e:
            raise StoreUnavailable() from e

        logger.info(f"Saved waste record {record.pk} for owner {owner_id}")
        return record

    def _list_by_owner(self, owner_id):
        try:
            return list(WasteRecord.objects.for_owner(owner_id))
        except DatabaseError as e:
            raise StoreUnavailable() from e


class InMemoryWasteLogStore(WasteLogStore):
    """
    Process-local store

    Records are unsaved WasteRecord instances; ids come from a counter so
    they double as the insertion sequence.
    """

    def __init__(self, clock=None):
        super().__init__(clock=clock)
        self._records = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _append(self, owner_id, evaluation):
        record = WasteRecord(owner_id=owner_id, created_at=self.clock(), **evaluation.as_fields())
        record.apply_evaluation()
        with self._lock:
            record.id = next(self._ids)
            self._records.setdefault(owner_id, []).append(record)
        logger.info(f"Saved in-memory waste record {record.id} for owner {owner_id}")
        return record

    def _list_by_owner(self, owner_id):
        with self._lock:
            records = list(self._records.get(owner_id, []))
        return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)


def get_store():
    """Build the store class named by settings.WASTELOG_STORE (not yet opened)"""
    store_class = import_string(getattr(settings, 'WASTELOG_STORE', DEFAULT_STORE))
    return store_class()
