"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Generator
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, create_engine
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    relationship,
    sessionmaker,
)

from search_api.config import set_current_config


class Base(DeclarativeBase):
    pass


class Company(Base):
    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)

    people: Mapped[list[Person]] = relationship(back_populates="company")


class Person(Base):
    __tablename__ = "people"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    city: Mapped[str | None] = mapped_column(String)
    age: Mapped[int | None] = mapped_column(Integer)
    funny: Mapped[bool | None] = mapped_column(Boolean)
    birth_date: Mapped[date | None] = mapped_column(Date)
    company_id: Mapped[int | None] = mapped_column(ForeignKey("companies.id"))

    company: Mapped[Company | None] = relationship(back_populates="people")


PEOPLE = [
    {"id": 1, "name": "Alice Martin", "city": "Paris", "age": 33, "funny": True,
     "birth_date": date(1991, 4, 2), "company_id": 1},
    {"id": 2, "name": "Bob Durand", "city": "Lyon", "age": 17, "funny": False,
     "birth_date": date(2007, 9, 12), "company_id": 1},
    {"id": 3, "name": "Carol Bonnet", "city": "Paris", "age": 45, "funny": None,
     "birth_date": date(1979, 1, 30), "company_id": 2},
    {"id": 4, "name": "Dave Petit", "city": None, "age": None, "funny": True,
     "birth_date": None, "company_id": None},
]


@pytest.fixture(autouse=True)
def _reset_current_config() -> Generator[None, None, None]:
    """Forget any config a test installed."""
    yield
    set_current_config(None)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[text]
exclude = ["^[^0-9].{0,2}$", "^the$"]
parse_meta = false

[bridge]
type_cast = true

[display]
colored_output = false
""")
    return config_path


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """In-memory SQLite session holding two companies and four people."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()
    session.add_all([Company(id=1, name="Acme"), Company(id=2, name="Globex")])
    session.add_all([Person(**person) for person in PEOPLE])
    session.commit()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def person_model() -> type[Person]:
    """The mapped ``people`` class."""
    return Person


@pytest.fixture
def company_model() -> type[Company]:
    """The mapped ``companies`` class."""
    return Company
