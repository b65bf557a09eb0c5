# Overview: Explicit data store handed to every service constructor.

"""
DataStore wraps one SQLAlchemy session.

WHY: Services receive their store instead of reaching for the process-wide
`db.session`, so the same service code runs on the request-scoped
Flask-SQLAlchemy session in the app and on private per-thread sessions in
the concurrency tests.

The store holds no state of its own beyond the session: each state-changing
service operation is one `transaction()` block, which commits on success and
rolls back on any exception.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, TypeVar

from sqlalchemy.orm import Session

T = TypeVar("T")


class DataStore:
    def __init__(self, session: Session):
        self.session = session

    def get(self, model: type[T], ident) -> T | None:
        if ident is None:
            return None
        return self.session.get(model, ident)

    def query(self, *entities):
        return self.session.query(*entities)

    def add(self, obj) -> None:
        self.session.add(obj)

    def execute(self, statement):
        return self.session.execute(statement)

    def flush(self) -> None:
        self.session.flush()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit on normal exit, roll back and re-raise on any exception."""
        try:
            yield self.session
            self.commit()
        except Exception:
            self.rollback()
            raise
