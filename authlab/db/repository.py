"""
Plain CRUD over one mapped entity.

Every store in the harness is reached through the same handful of operations,
so admin tooling and services share this class instead of repeating
query boilerplate per model. Models are expected to expose ``id`` and, when
they belong to a user, ``user_id``; ``created_at_utc`` drives ordering.
"""
from typing import Any, Generic, Type, TypeVar

from sqlalchemy.orm import Session

from authlab.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    def __init__(self, model: Type[ModelT]):
        self.model = model

    def _ordered(self, query):
        created = getattr(self.model, "created_at_utc", None)
        return query.order_by(created.desc()) if created is not None else query

    def create(self, db: Session, **fields: Any) -> ModelT:
        row = self.model(**fields)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    def get(self, db: Session, row_id: Any) -> ModelT | None:
        return db.get(self.model, row_id)

    def list_all(self, db: Session, limit: int | None = None) -> list[ModelT]:
        query = self._ordered(db.query(self.model))
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def list_by_owner(self, db: Session, user_id: str, limit: int | None = None) -> list[ModelT]:
        query = self._ordered(db.query(self.model).filter(self.model.user_id == user_id))
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def update_fields(self, db: Session, row_id: Any, **fields: Any) -> ModelT | None:
        row = self.get(db, row_id)
        if row is None:
            return None
        for name, value in fields.items():
            setattr(row, name, value)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    def delete(self, db: Session, row_id: Any) -> bool:
        row = self.get(db, row_id)
        if row is None:
            return False
        db.delete(row)
        db.commit()
        return True

    def delete_by_owner(self, db: Session, user_id: str) -> int:
        deleted = db.query(self.model).filter(self.model.user_id == user_id).delete(synchronize_session=False)
        db.commit()
        return deleted

    def delete_all(self, db: Session) -> int:
        deleted = db.query(self.model).delete(synchronize_session=False)
        db.commit()
        return deleted
