import logging

from sqlalchemy import delete, select, update

from .errors import BadRequestError, NotFoundError
from .models import Book, utcnow

logger = logging.getLogger(__name__)


class BookRepository:
    """
    Store operations on the books table.

    Every call checks a connection out of the manager's pool for a single
    session scope; nothing is cached between calls. Driver failures come
    back as StoreError (see ConnectionManager.session_scope).
    """

    def __init__(self, manager):
        self.manager = manager

    # ----------------- reads -----------------

    def list_all(self):
        with self.manager.session_scope() as session:
            return list(session.execute(select(Book).order_by(Book.id)).scalars())

    def list_recent(self, limit=4):
        if limit < 0:
            raise BadRequestError("limit must not be negative")

        q = (
            select(Book)
            .order_by(Book.created_at.desc(), Book.id.desc())
            .limit(limit)
        )
        with self.manager.session_scope() as session:
            return list(session.execute(q).scalars())

    def get(self, book_id):
        with self.manager.session_scope() as session:
            book = session.get(Book, book_id)
            if book is None:
                raise NotFoundError("book not found")
            return book

    # ----------------- writes -----------------

    def create(self, fields):
        now = utcnow()
        book = Book(**_mutable(fields), created_at=now, updated_at=now)

        with self.manager.session_scope() as session:
            session.add(book)
            session.flush()
            # reload so column types (e.g. Numeric price) match later reads
            session.refresh(book)

        logger.info("Created book %s (%s)", book.id, book.title)
        return book

    def update(self, book_id, fields):
        """Replace every mutable field of one row in a single UPDATE."""
        stmt = (
            update(Book)
            .where(Book.id == book_id)
            .values(**_mutable(fields), updated_at=utcnow())
            .returning(Book)
        )
        with self.manager.session_scope() as session:
            book = session.execute(stmt).scalar_one_or_none()
            if book is None:
                raise NotFoundError("book not found")

        logger.info("Updated book %s", book_id)
        return book

    def delete(self, book_id):
        with self.manager.session_scope() as session:
            result = session.execute(delete(Book).where(Book.id == book_id))
            if result.rowcount == 0:
                raise NotFoundError("book not found")

        logger.info("Deleted book %s", book_id)


def _mutable(fields):
    return {name: fields.get(name) for name in Book.MUTABLE_FIELDS}
