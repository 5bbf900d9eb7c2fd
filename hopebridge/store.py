"""Document store handle.

A thin wrapper around a SQLAlchemy session that the services receive by
injection. Each call that writes commits on its own, so a multi-step
operation (payment write, then wish update) is not atomic; callers that
need a unit of work must not rely on the store for it.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from hopebridge.errors import NotFoundError

M = TypeVar("M")


class DocumentStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    # ---- writes -------------------------------------------------------
    def add(self, doc: M, *, commit: bool = True) -> M:
        self.session.add(doc)
        if commit:
            self.commit()
        else:
            self.session.flush()
        return doc

    def update(self, doc: M, *, commit: bool = True, **fields: Any) -> M:
        for key, value in fields.items():
            if not hasattr(type(doc), key):
                raise AttributeError(f"{type(doc).__name__} has no field {key!r}")
            setattr(doc, key, value)
        if commit:
            self.commit()
        return doc

    def commit(self) -> None:
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def rollback(self) -> None:
        self.session.rollback()

    # ---- reads --------------------------------------------------------
    def get(self, model: Type[M], doc_id: Optional[str]) -> Optional[M]:
        if not doc_id:
            return None
        return self.session.get(model, doc_id)

    def require(self, model: Type[M], doc_id: Optional[str]) -> M:
        doc = self.get(model, doc_id)
        if doc is None:
            raise NotFoundError(
                f"{model.__name__} not found",
                extra={"collection": model.__tablename__, "id": doc_id},
            )
        return doc

    def find(self, model: Type[M], *, order_by: Optional[Iterable[Any]] = None, **filters: Any) -> List[M]:
        q = self.session.query(model).filter_by(**filters)
        if order_by is not None:
            q = q.order_by(*order_by)
        return q.all()

    def first(self, model: Type[M], *, order_by: Optional[Iterable[Any]] = None, **filters: Any) -> Optional[M]:
        q = self.session.query(model).filter_by(**filters)
        if order_by is not None:
            q = q.order_by(*order_by)
        return q.first()


def current_store() -> DocumentStore:
    """Store bound to the Flask-SQLAlchemy session of the active app."""
    from hopebridge.extensions import db

    return DocumentStore(db.session)
