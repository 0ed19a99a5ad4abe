"""
Content store abstraction for Firestore, SQLAlchemy and an in-memory test
implementation.

Every adapter exposes the same small document interface. Decisions about
missing collections and missing indexes are made here, so callers never have
to inspect backend-specific error codes.
"""

from __future__ import annotations

import copy
import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Union

from firebase_admin import firestore
from google.api_core import exceptions as gcloud_exceptions
from google.cloud.firestore_v1 import FieldFilter
from google.cloud.firestore_v1 import Query as FirestoreQuery
from sqlalchemy import JSON, Column, Float, String, create_engine, delete, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backend.errors import DocumentNotFound, IndexRequired

logger = logging.getLogger(__name__)

ASCENDING = "asc"
DESCENDING = "desc"


@dataclass(frozen=True)
class Query:
    """Immutable query description: filters, ordering, limit and cursor."""

    filters: Tuple[Tuple[str, str, Any], ...] = ()
    order: Tuple[Tuple[str, str], ...] = ()
    limit_count: Optional[int] = None
    cursor: Optional[str] = None

    def where(self, field_path: str, op: str, value: Any) -> "Query":
        return replace(self, filters=self.filters + ((field_path, op, value),))

    def order_by(self, field_path: str, direction: str = ASCENDING) -> "Query":
        return replace(self, order=self.order + ((field_path, direction),))

    def limit(self, count: int) -> "Query":
        return replace(self, limit_count=count)

    def start_after(self, doc_id: Optional[str]) -> "Query":
        return replace(self, cursor=doc_id)


@dataclass
class StoredDocument:
    id: str
    data: Dict[str, Any]


@dataclass
class NotFound:
    """The queried collection (or the database behind it) does not exist."""

    collection: str
    reason: str = ""


QueryResult = Union[List[StoredDocument], NotFound]


class WriteBatch(Protocol):
    """Atomic multi-document write. Nothing is written unless commit succeeds."""

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        ...

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        ...

    def commit(self) -> None:
        ...


class ContentStore(Protocol):
    """Interface for document database access."""

    def add(self, collection: str, data: dict) -> str:
        ...

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        ...

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        ...

    def query(self, collection: str, query: Query) -> QueryResult:
        ...

    def batch(self) -> WriteBatch:
        ...


# ---------------------------------------------------------------------------
# Query evaluation shared by the in-process stores
# ---------------------------------------------------------------------------

_MISSING = object()

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
    "in": lambda a, b: a in b,
    "not-in": lambda a, b: a not in b,
    "array-contains": lambda a, b: isinstance(a, list) and b in a,
}


def _field_value(data: dict, field_path: str) -> Any:
    value: Any = data
    for part in field_path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _sort_documents(
    docs: List[StoredDocument], order: Tuple[Tuple[str, str], ...]
) -> List[StoredDocument]:
    last_direction = order[-1][1] if order else ASCENDING
    result = sorted(docs, key=lambda d: d.id, reverse=last_direction == DESCENDING)
    for field_path, direction in reversed(order):
        result = sorted(
            result,
            key=lambda d: _field_value(d.data, field_path),
            reverse=direction == DESCENDING,
        )
    return result


def apply_query(
    docs: Dict[str, dict], query: Query, collection: str = ""
) -> List[StoredDocument]:
    """
    Evaluates a query the way Firestore does: documents missing a filtered or
    ordered field are excluded, ties are broken by document id, and a cursor
    pointing at a document that no longer exists is ignored.
    """
    unknown = [op for _, op, _ in query.filters if op not in _OPERATORS]
    if unknown:
        raise ValueError(f"Unsupported query operator(s): {unknown}")

    def matches(data: dict) -> bool:
        for field_path, op, value in query.filters:
            current = _field_value(data, field_path)
            if current is _MISSING or not _OPERATORS[op](current, value):
                return False
        for field_path, _ in query.order:
            if _field_value(data, field_path) is _MISSING:
                return False
        return True

    candidates = [
        StoredDocument(id=doc_id, data=data)
        for doc_id, data in docs.items()
        if matches(data)
    ]

    cursor_doc = None
    if query.cursor:
        if query.cursor in docs and all(
            _field_value(docs[query.cursor], f) is not _MISSING for f, _ in query.order
        ):
            cursor_doc = StoredDocument(id=query.cursor, data=docs[query.cursor])
        else:
            logger.info(
                "Ignoring stale cursor %s for collection %s", query.cursor, collection
            )

    if cursor_doc and all(doc.id != cursor_doc.id for doc in candidates):
        # The cursor document no longer matches the filters; it still marks
        # the position to resume from.
        ordered = _sort_documents(candidates + [cursor_doc], query.order)
        position = next(i for i, d in enumerate(ordered) if d.id == cursor_doc.id)
        ordered = ordered[position + 1 :]
    else:
        ordered = _sort_documents(candidates, query.order)
        if cursor_doc:
            position = next(i for i, d in enumerate(ordered) if d.id == cursor_doc.id)
            ordered = ordered[position + 1 :]

    if query.limit_count is not None:
        ordered = ordered[: query.limit_count]
    return [StoredDocument(id=d.id, data=copy.deepcopy(d.data)) for d in ordered]


def _new_document_id() -> str:
    return uuid.uuid4().hex[:20]


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class InMemoryContentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()

    def add(self, collection: str, data: dict) -> str:
        doc_id = _new_document_id()
        self.collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        data = self.collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        _apply_set(self.collections, collection, doc_id, data, merge)

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        _apply_update(self.collections, collection, doc_id, data)

    def delete(self, collection: str, doc_id: str) -> None:
        _apply_delete(self.collections, collection, doc_id)

    def query(self, collection: str, query: Query) -> QueryResult:
        docs = self.collections.get(collection)
        if not docs:
            return NotFound(collection, "collection has no documents")
        return apply_query(docs, query, collection)

    def batch(self) -> "InMemoryWriteBatch":
        return InMemoryWriteBatch(self)


def _apply_set(
    collections: Dict[str, Dict[str, dict]],
    collection: str,
    doc_id: str,
    data: dict,
    merge: bool,
) -> None:
    docs = collections.setdefault(collection, {})
    if merge and doc_id in docs:
        docs[doc_id].update(copy.deepcopy(data))
    else:
        docs[doc_id] = copy.deepcopy(data)


def _apply_update(
    collections: Dict[str, Dict[str, dict]], collection: str, doc_id: str, data: dict
) -> None:
    docs = collections.get(collection, {})
    if doc_id not in docs:
        raise DocumentNotFound(collection, doc_id)
    docs[doc_id].update(copy.deepcopy(data))


def _apply_delete(
    collections: Dict[str, Dict[str, dict]], collection: str, doc_id: str
) -> None:
    docs = collections.get(collection)
    if docs is None:
        return
    docs.pop(doc_id, None)


@dataclass
class InMemoryWriteBatch:
    store: InMemoryContentStore
    operations: List[Tuple[str, tuple]] = field(default_factory=list)

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        self.operations.append(("set", (collection, doc_id, data, merge)))

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        self.operations.append(("update", (collection, doc_id, data)))

    def delete(self, collection: str, doc_id: str) -> None:
        self.operations.append(("delete", (collection, doc_id)))

    def commit(self) -> None:
        staged = copy.deepcopy(self.store.collections)
        for name, args in self.operations:
            if name == "set":
                _apply_set(staged, *args)
            elif name == "update":
                _apply_update(staged, *args)
            else:
                _apply_delete(staged, *args)
        self.store.collections = staged
        self.operations = []


# ---------------------------------------------------------------------------
# Firestore store
# ---------------------------------------------------------------------------


class FirestoreContentStore:
    """Firestore-backed implementation using the firebase_admin client."""

    def __init__(self, client=None):
        self._client = client if client is not None else firestore.client()

    def add(self, collection: str, data: dict) -> str:
        _, doc_ref = self._client.collection(collection).add(data)
        return doc_ref.id

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        try:
            snapshot = self._client.collection(collection).document(doc_id).get()
        except gcloud_exceptions.NotFound as e:
            logger.info("Document %s/%s not found: %s", collection, doc_id, e)
            return None
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        self._client.collection(collection).document(doc_id).set(data, merge=merge)

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        try:
            self._client.collection(collection).document(doc_id).update(data)
        except gcloud_exceptions.NotFound as e:
            raise DocumentNotFound(collection, doc_id) from e

    def delete(self, collection: str, doc_id: str) -> None:
        self._client.collection(collection).document(doc_id).delete()

    def query(self, collection: str, query: Query) -> QueryResult:
        ref = self._client.collection(collection)
        for field_path, op, value in query.filters:
            ref = ref.where(filter=FieldFilter(field_path, op, value))
        for field_path, direction in query.order:
            ref = ref.order_by(
                field_path,
                direction=(
                    FirestoreQuery.DESCENDING
                    if direction == DESCENDING
                    else FirestoreQuery.ASCENDING
                ),
            )
        try:
            if query.cursor:
                snapshot = (
                    self._client.collection(collection).document(query.cursor).get()
                )
                if snapshot.exists:
                    ref = ref.start_after(snapshot)
                else:
                    logger.info(
                        "Ignoring stale cursor %s for collection %s",
                        query.cursor,
                        collection,
                    )
            if query.limit_count is not None:
                ref = ref.limit(query.limit_count)
            return [
                StoredDocument(id=doc.id, data=doc.to_dict() or {})
                for doc in ref.stream()
            ]
        except gcloud_exceptions.NotFound as e:
            return NotFound(collection, str(e))
        except gcloud_exceptions.FailedPrecondition as e:
            # Firestore reports a missing composite index this way; the
            # message carries the link to create it.
            raise IndexRequired(str(e)) from e

    def batch(self) -> "FirestoreWriteBatch":
        return FirestoreWriteBatch(self._client)


class FirestoreWriteBatch:
    def __init__(self, client):
        self._client = client
        self._batch = client.batch()
        self._collections: set[str] = set()

    def _ref(self, collection: str, doc_id: str):
        self._collections.add(collection)
        return self._client.collection(collection).document(doc_id)

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        self._batch.set(self._ref(collection, doc_id), data, merge=merge)

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        self._batch.update(self._ref(collection, doc_id), data)

    def delete(self, collection: str, doc_id: str) -> None:
        self._batch.delete(self._ref(collection, doc_id))

    def commit(self) -> None:
        try:
            self._batch.commit()
        except gcloud_exceptions.NotFound as e:
            raise DocumentNotFound(",".join(sorted(self._collections)), "") from e


# ---------------------------------------------------------------------------
# SQLAlchemy store
# ---------------------------------------------------------------------------

_DATETIME_TAG = "__datetime__"


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DATETIME_TAG: value.isoformat()}
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


def _decode(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {_DATETIME_TAG}:
            return datetime.fromisoformat(value[_DATETIME_TAG])
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


class SqlContentStore:
    """
    SQLAlchemy-backed document store. Accepts any SQLAlchemy URL (e.g.,
    Postgres, or SQLite for local development and tests).

    Documents are stored as JSON rows; queries are evaluated in-process with
    the same semantics as the in-memory store.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlContentStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _load_collection(self, session: Session, collection: str) -> Dict[str, dict]:
        rows = session.execute(
            select(DocumentRow).where(DocumentRow.collection == collection)
        ).scalars()
        return {row.doc_id: _decode(row.data) for row in rows}

    def add(self, collection: str, data: dict) -> str:
        doc_id = _new_document_id()
        with self.Session() as session:
            session.add(
                DocumentRow(
                    collection=collection,
                    doc_id=doc_id,
                    data=_encode(data),
                    updated_at=time.time(),
                )
            )
            session.commit()
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, doc_id))
            return _decode(row.data) if row else None

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        with self.Session() as session:
            _sql_set(session, collection, doc_id, data, merge)
            session.commit()

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        with self.Session() as session:
            _sql_update(session, collection, doc_id, data)
            session.commit()

    def delete(self, collection: str, doc_id: str) -> None:
        with self.Session() as session:
            session.execute(
                delete(DocumentRow).where(
                    DocumentRow.collection == collection,
                    DocumentRow.doc_id == doc_id,
                )
            )
            session.commit()

    def query(self, collection: str, query: Query) -> QueryResult:
        with self.Session() as session:
            docs = self._load_collection(session, collection)
        if not docs:
            return NotFound(collection, "collection has no documents")
        return apply_query(docs, query, collection)

    def batch(self) -> "SqlWriteBatch":
        return SqlWriteBatch(self)


def _sql_set(
    session: Session, collection: str, doc_id: str, data: dict, merge: bool
) -> None:
    row = session.get(DocumentRow, (collection, doc_id))
    if row and merge:
        merged = _decode(row.data)
        merged.update(data)
        row.data = _encode(merged)
        row.updated_at = time.time()
    elif row:
        row.data = _encode(data)
        row.updated_at = time.time()
    else:
        session.add(
            DocumentRow(
                collection=collection,
                doc_id=doc_id,
                data=_encode(data),
                updated_at=time.time(),
            )
        )


def _sql_update(session: Session, collection: str, doc_id: str, data: dict) -> None:
    row = session.get(DocumentRow, (collection, doc_id))
    if not row:
        raise DocumentNotFound(collection, doc_id)
    merged = _decode(row.data)
    merged.update(data)
    row.data = _encode(merged)
    row.updated_at = time.time()


@dataclass
class SqlWriteBatch:
    store: SqlContentStore
    operations: List[Tuple[str, tuple]] = field(default_factory=list)

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        self.operations.append(("set", (collection, doc_id, data, merge)))

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        self.operations.append(("update", (collection, doc_id, data)))

    def delete(self, collection: str, doc_id: str) -> None:
        self.operations.append(("delete", (collection, doc_id)))

    def commit(self) -> None:
        with self.store.Session() as session:
            try:
                for name, args in self.operations:
                    if name == "set":
                        _sql_set(session, *args)
                    elif name == "update":
                        _sql_update(session, *args)
                    else:
                        collection, doc_id = args
                        row = session.get(DocumentRow, (collection, doc_id))
                        if row:
                            session.delete(row)
                    # Flush so later operations in the batch see earlier ones.
                    session.flush()
                session.commit()
            except Exception:
                session.rollback()
                raise
        self.operations = []


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"

    collection = Column(String, primary_key=True)
    doc_id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    updated_at = Column(Float, nullable=False)
