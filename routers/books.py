from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import auth, catalog, errors, models, schemas
from database import get_db

router = APIRouter(prefix="/books", tags=["books"])


@router.get("/", response_model=list[schemas.BookOut])
def list_books(
    sort: str = Query(default="title", pattern="^(title|year)$"),
    db: Session = Depends(get_db),
):
    if sort == "year":
        return catalog.sort_by_publish_year(db)
    return catalog.sort_by_title(db)


@router.get("/search", response_model=list[schemas.BookOut])
def search_books(
    author: str | None = Query(default=None, min_length=1),
    title: str | None = Query(default=None, min_length=1),
    db: Session = Depends(get_db),
):
    if author is None and title is None:
        raise errors.ValidationError({"author": "Provide an author or a title to search for"})

    return catalog.search_books(db, author=author, title=title)


@router.get("/filter", response_model=list[schemas.BookOut])
def filter_books(
    genre: str = Query(default=""),
    min_stock: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    return catalog.filter_books(db, genre, min_stock)


@router.get("/isbn/{isbn}", response_model=schemas.BookOut)
def get_book_by_isbn(isbn: str, db: Session = Depends(get_db)):
    book = catalog.find_by_isbn(db, isbn.strip())
    if book is None:
        raise errors.NotFoundError("isbn")
    return book


@router.post("/", response_model=schemas.BookOut, status_code=status.HTTP_201_CREATED)
def add_book(
    book: schemas.BookCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(auth.get_current_user),
):
    return catalog.add_book(db, book)
