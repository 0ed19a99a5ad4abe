"""
Generic repository shared by every content type.

A repository is parameterized by an `EntitySpec` describing the collection,
the entity dataclass and how stored documents are read back. Validation is
left to the server actions; the repository only talks to the store and
invalidates cached pages after writes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Generic, Iterable, List, Optional, Tuple, Type, TypeVar

from dacite import Config, from_dict

from backend.cache import PageCache, revalidate_paths
from backend.store import ContentStore, NotFound, Query, StoredDocument
from shared.api import Page
from shared.constants import ADMIN_PATH, HOME_PATH
from shared.json_utils import convert_keys

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DACITE_CONFIG = Config(check_types=False, cast=[Enum])


@dataclass(frozen=True)
class EntitySpec(Generic[T]):
    collection: str
    entity_type: Type[T]
    default_query: Query = field(default_factory=Query)
    revalidate: Tuple[str, ...] = (HOME_PATH, ADMIN_PATH)
    # Fills in fields that older documents were written without.
    defaults: Dict[str, object] = field(default_factory=dict)
    normalize: Optional[Callable[[dict], dict]] = None

    def from_document(self, doc_id: str, data: dict) -> T:
        payload = dict(self.defaults)
        payload.update(convert_keys(data, "camel_to_snake"))
        if self.normalize:
            payload = self.normalize(payload)
        payload["id"] = doc_id
        return from_dict(data_class=self.entity_type, data=payload, config=_DACITE_CONFIG)


class ContentRepository(Generic[T]):
    def __init__(self, store: ContentStore, cache: PageCache, spec: EntitySpec[T]):
        self.store = store
        self.cache = cache
        self.spec = spec

    @property
    def collection(self) -> str:
        return self.spec.collection

    def revalidate(self) -> None:
        revalidate_paths(self.cache, *self.spec.revalidate)

    def _documents(self, query: Query) -> List[StoredDocument]:
        result = self.store.query(self.collection, query)
        if isinstance(result, NotFound):
            logger.info(
                "Collection %s not found, returning empty list.", result.collection
            )
            return []
        return result

    def add(self, data: dict) -> str:
        doc_id = self.store.add(self.collection, convert_keys(data, "snake_to_camel"))
        logger.info("Added %s/%s", self.collection, doc_id)
        self.revalidate()
        return doc_id

    def get(self, doc_id: str) -> Optional[T]:
        data = self.store.get(self.collection, doc_id)
        if data is None:
            return None
        return self.spec.from_document(doc_id, data)

    def set(self, doc_id: str, data: dict, merge: bool = False) -> None:
        self.store.set(
            self.collection, doc_id, convert_keys(data, "snake_to_camel"), merge=merge
        )
        self.revalidate()

    def update(self, doc_id: str, data: dict) -> None:
        self.store.update(self.collection, doc_id, convert_keys(data, "snake_to_camel"))
        self.revalidate()

    def delete(self, doc_id: str) -> None:
        self.store.delete(self.collection, doc_id)
        logger.info("Deleted %s/%s", self.collection, doc_id)
        self.revalidate()

    def list(self, query: Optional[Query] = None) -> List[T]:
        docs = self._documents(query if query is not None else self.spec.default_query)
        return [self.spec.from_document(doc.id, doc.data) for doc in docs]

    def count(self) -> int:
        return len(self._documents(Query()))

    def page(
        self, query: Optional[Query], limit: int, cursor: Optional[str] = None
    ) -> Page[T]:
        """
        Returns up to `limit` entities after `cursor`. One extra document is
        fetched to learn whether another page exists without a count query.
        """
        base = query if query is not None else self.spec.default_query
        docs = self._documents(base.start_after(cursor or None).limit(limit + 1))
        has_more = len(docs) > limit
        items = [self.spec.from_document(d.id, d.data) for d in docs[:limit]]
        return Page(
            items=items,
            has_more=has_more,
            next_cursor=items[-1].id if items else None,
        )

    def batch_update(self, updates: Iterable[Tuple[str, dict]]) -> int:
        """Applies all updates atomically; returns the number of documents."""
        batch = self.store.batch()
        count = 0
        for doc_id, data in updates:
            batch.update(self.collection, doc_id, convert_keys(data, "snake_to_camel"))
            count += 1
        batch.commit()
        self.revalidate()
        return count

    def batch_delete(self, doc_ids: Iterable[str]) -> int:
        batch = self.store.batch()
        count = 0
        for doc_id in doc_ids:
            batch.delete(self.collection, doc_id)
            count += 1
        batch.commit()
        self.revalidate()
        return count
