"""
Persistence adapter.

Services never touch the SQLAlchemy session directly; they receive a Store and
use its small document-style interface: find one/many by filter, insert,
update with set/upsert semantics, delete, and group+sum aggregation. Every
driver failure surfaces as InternalFailure (or Conflict for uniqueness
violations) so callers see one error taxonomy.
"""
import logging
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import func, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions import db
from services.errors import Conflict, InternalFailure

logger = logging.getLogger(__name__)


class Store:
    """Document-store style access to the application tables."""

    def __init__(self, session):
        self.session = session
        self._depth = 0

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self):
        """Run a block atomically.

        Writes inside the block are flushed but not committed; the outermost
        block commits on success and rolls back on any exception. Nested
        blocks join the outer transaction.
        """
        outermost = self._depth == 0
        self._depth += 1
        try:
            yield self
            if outermost:
                with self._guard('commit'):
                    self.session.commit()
        except Exception:
            if outermost:
                self.session.rollback()
            raise
        finally:
            self._depth -= 1

    @property
    def in_transaction(self):
        return self._depth > 0

    @contextmanager
    def _guard(self, action):
        try:
            yield
        except IntegrityError as e:
            if not self.in_transaction:
                self.session.rollback()
            logger.warning(f"Uniqueness violation during {action}: {e.orig}")
            raise Conflict('Record already exists') from e
        except SQLAlchemyError as e:
            if not self.in_transaction:
                self.session.rollback()
            logger.exception(f"Store failure during {action}")
            raise InternalFailure() from e

    def _autocommit(self):
        if not self.in_transaction:
            self.session.commit()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _query(self, model, criteria, filters):
        query = self.session.query(model)
        if criteria:
            query = query.filter(*criteria)
        if filters:
            query = query.filter_by(**filters)
        return query

    def find_one(self, model, *criteria, **filters):
        """Return the first record matching the filter, or None."""
        with self._guard(f'find_one {model.__tablename__}'):
            return self._query(model, criteria, filters).first()

    def find_many(self, model, *criteria, order_by=None, **filters):
        """Return every record matching the filter."""
        with self._guard(f'find_many {model.__tablename__}'):
            query = self._query(model, criteria, filters)
            if order_by is not None:
                query = query.order_by(order_by)
            return query.all()

    def aggregate_sum(self, model, group_field, sum_field, *criteria, **filters):
        """Group matching records and sum one column per group.

        Returns:
            list: [{'group': value, 'total': Decimal, 'count': int}] sorted by
                  total descending
        """
        group_col = getattr(model, group_field)
        sum_col = getattr(model, sum_field)
        total = func.sum(sum_col).label('total')

        with self._guard(f'aggregate {model.__tablename__}'):
            query = self.session.query(group_col, total, func.count().label('count'))
            if criteria:
                query = query.filter(*criteria)
            if filters:
                query = query.filter_by(**filters)
            rows = query.group_by(group_col).order_by(total.desc()).all()

        return [
            {'group': row[0], 'total': row[1], 'count': row[2]}
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_one(self, record):
        """Insert a new record and return it with its identifier assigned."""
        with self._guard(f'insert {record.__tablename__}'):
            self.session.add(record)
            self.session.flush()
            self._autocommit()
        return record

    def update_one(self, model, values, *criteria, upsert=False, on_insert=None, **filters):
        """Set ``values`` on the record matching the filter.

        The filter is expected to identify a single record (by ID, by a unique
        key, or by a status guard such as ``status='pending'``). With
        ``upsert=True`` a missing record is created from the equality filters,
        ``values`` and ``on_insert`` (fields written only on creation).

        Returns:
            int: Number of matched records (0 when nothing matched and no
                 upsert happened; 1 after an upsert insert)
        """
        values = dict(values)
        if hasattr(model, 'updated_at'):
            values.setdefault('updated_at', datetime.utcnow())

        with self._guard(f'update {model.__tablename__}'):
            matched = self._query(model, criteria, filters).update(
                values, synchronize_session='fetch'
            )

            if matched == 0 and upsert:
                fields = dict(filters)
                fields.update(on_insert or {})
                fields.update(values)
                self.session.add(model(**fields))
                self.session.flush()
                matched = 1

            self._autocommit()
        return matched

    def update_many(self, model, values, *criteria, **filters):
        """Set ``values`` on every matching record; return the matched count."""
        values = dict(values)
        if hasattr(model, 'updated_at'):
            values.setdefault('updated_at', datetime.utcnow())

        with self._guard(f'update_many {model.__tablename__}'):
            matched = self._query(model, criteria, filters).update(
                values, synchronize_session='fetch'
            )
            self._autocommit()
        return matched

    def delete_one(self, model, *criteria, **filters):
        """Delete the record matching the filter; return the deleted count."""
        with self._guard(f'delete {model.__tablename__}'):
            deleted = self._query(model, criteria, filters).delete(
                synchronize_session='fetch'
            )
            self._autocommit()
        return deleted

    def ping(self):
        """Round-trip to the database; raises InternalFailure when unreachable."""
        with self._guard('ping'):
            self.session.execute(text('SELECT 1'))


def get_store():
    """Store bound to the current request's database session."""
    return Store(db.session)
