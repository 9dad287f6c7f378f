import posixpath
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from config import settings
from database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")


class Book(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True)
    isbn = Column(String(32), unique=True, nullable=False)
    title = Column(String, nullable=False)
    author = Column(String, nullable=False)
    publish_year = Column(String(4), nullable=False)
    page_count = Column(Integer, nullable=False)
    genre = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    stock = Column(Integer, nullable=False)
    cover_image = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    @property
    def cover_image_path(self) -> str | None:
        if self.cover_image is None:
            return None
        return posixpath.join("/", settings.COVER_IMAGE_BASE_PATH, self.cover_image)
