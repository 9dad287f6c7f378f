"""Catalog queries over the ``books`` table.

Sorting, matching and filtering are all done by the database; these
functions only build the queries.
"""

from typing import List, Optional

from sqlalchemy import Integer, cast
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import errors, models, schemas


def _contains(column, text: str):
    # Case-insensitive substring, with LIKE wildcards taken literally
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


def sort_by_title(db: Session) -> List[models.Book]:
    return db.query(models.Book).order_by(models.Book.title.asc()).all()


def sort_by_publish_year(db: Session) -> List[models.Book]:
    return db.query(models.Book).order_by(cast(models.Book.publish_year, Integer).desc()).all()


def find_by_isbn(db: Session, isbn: str) -> Optional[models.Book]:
    return db.query(models.Book).filter(models.Book.isbn == isbn).first()


def search_books(
    db: Session, author: Optional[str] = None, title: Optional[str] = None
) -> List[models.Book]:
    query = db.query(models.Book)
    if author is not None:
        query = query.filter(_contains(models.Book.author, author))
    if title is not None:
        query = query.filter(_contains(models.Book.title, title))
    return query.order_by(models.Book.title.asc()).all()


def find_by_author(db: Session, author: str) -> List[models.Book]:
    return search_books(db, author=author)


def find_by_title(db: Session, title: str) -> List[models.Book]:
    return search_books(db, title=title)


def filter_books(db: Session, genre: str, min_stock: int) -> List[models.Book]:
    return (
        db.query(models.Book)
        .filter(_contains(models.Book.genre, genre), models.Book.stock >= min_stock)
        .all()
    )


def add_book(db: Session, book: schemas.BookCreate) -> models.Book:
    new_book = models.Book(**book.model_dump())
    db.add(new_book)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise errors.ConflictError(errors.unique_violation_field(exc)) from exc
    db.refresh(new_book)
    return new_book
