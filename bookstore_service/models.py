from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    Numeric,
    String,
)

Base = declarative_base()


def utcnow():
    """Naive UTC timestamp, the form stored in the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Book(Base):
    __tablename__ = "books"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_books_price"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    isbn = Column(String(20))
    year = Column(Integer)
    # unscaled so submitted prices round-trip without rounding
    price = Column(Numeric)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    # Fields a client may set; id and timestamps belong to the store.
    MUTABLE_FIELDS = ("title", "author", "isbn", "year", "price")

    def __repr__(self):
        return f"<Book id={self.id} title={self.title!r}>"
