"""Document store client.

Each collection holds JSON documents addressed by a string ``id``. Every ``save``
commits exactly one document; there is no multi-document transaction, so callers
that touch several documents must live with the window between their writes.
"""
import copy
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import Document

USERS = "users"
PRODUCTS = "products"
CARTS = "carts"
ORDERS = "orders"


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _field_equals(field: str, value: Any):
    element = Document.body[field]
    if isinstance(value, bool):
        return element.as_boolean() == value
    if isinstance(value, int):
        return element.as_integer() == value
    if isinstance(value, float):
        return element.as_float() == value
    return element.as_string() == str(value)


class DocumentStore:
    def __init__(self, session: Session):
        self.session = session

    def _select(self, collection: str, filters: Optional[Dict[str, Any]], search: Optional[Dict[str, str]]):
        stmt = select(Document).where(Document.collection == collection)
        for field, value in (filters or {}).items():
            stmt = stmt.where(_field_equals(field, value))
        # case-insensitive substring match, like a Mongo $regex with the "i" option
        for field, term in (search or {}).items():
            if term:
                stmt = stmt.where(Document.body[field].as_string().ilike(_like_pattern(term), escape="\\"))
        return stmt

    def _row(self, collection: str, doc_id: str) -> Document | None:
        stmt = select(Document).where(Document.collection == collection, Document.id == doc_id)
        return self.session.execute(stmt).scalars().first()

    @staticmethod
    def _to_document(row: Document) -> Dict[str, Any]:
        # Copy so callers can mutate freely without touching the identity map
        return {"id": row.id, **copy.deepcopy(row.body)}

    def find_by_id(self, collection: str, doc_id: str) -> Dict[str, Any] | None:
        row = self._row(collection, doc_id)
        return self._to_document(row) if row is not None else None

    def find_one(self, collection: str, filters: Dict[str, Any]) -> Dict[str, Any] | None:
        row = self.session.execute(self._select(collection, filters, None).order_by(Document.seq)).scalars().first()
        return self._to_document(row) if row is not None else None

    def find(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        *,
        search: Optional[Dict[str, str]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> List[Dict[str, Any]]:
        stmt = self._select(collection, filters, search)
        stmt = stmt.order_by(Document.seq.desc() if newest_first else Document.seq)
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        return [self._to_document(row) for row in self.session.execute(stmt).scalars().all()]

    def count(self, collection: str, filters: Optional[Dict[str, Any]] = None, *, search: Optional[Dict[str, str]] = None) -> int:
        subquery = self._select(collection, filters, search).subquery()
        return self.session.execute(select(func.count()).select_from(subquery)).scalar_one()

    def save(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert or replace a whole document and commit it. Returns the stored copy."""
        body = {key: value for key, value in document.items() if key != "id"}
        doc_id = document.get("id")
        row = self._row(collection, doc_id) if doc_id else None
        if row is None:
            row = Document(id=doc_id or uuid.uuid4().hex, collection=collection, body=copy.deepcopy(body))
            self.session.add(row)
        else:
            row.body = copy.deepcopy(body)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        self.session.refresh(row)
        return self._to_document(row)

    def delete_by_id(self, collection: str, doc_id: str) -> Dict[str, Any] | None:
        row = self._row(collection, doc_id)
        if row is None:
            return None
        deleted = self._to_document(row)
        self.session.delete(row)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return deleted
