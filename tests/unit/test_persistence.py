"""Unit tests for executing find options with SQLAlchemy."""

from __future__ import annotations

import pytest
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from search_api.exceptions import InvalidFindOptionError, InvalidFragmentError
from search_api.fragment import SqlFragment
from search_api.persistence import build_statement, count, find_all, render, to_text_clause
from search_api.search import Search


@pytest.fixture
def search_class(person_model: type) -> type[Search]:
    class PersonSearch(Search, model=person_model):
        pass

    PersonSearch.search_accessor("keyword", operator="full_text", columns=["name", "city"])

    @PersonSearch.search_attribute("company")
    def company(search: Search) -> dict:
        return {
            "joins": "JOIN companies ON companies.id = people.company_id",
            "conditions": ("companies.name = ?", search.company),
        }

    return PersonSearch


def _names(people: list) -> list[str]:
    return sorted(person.name for person in people)


# ---------------------------------------------------------------------------
# Text clauses
# ---------------------------------------------------------------------------


class TestTextClause:
    def test_placeholders_become_binds(self) -> None:
        clause = to_text_clause(("a = ? AND b = ?", 1, 2))
        assert clause.text == "a = :p0 AND b = :p1"
        assert clause.compile().params == {"p0": 1, "p1": 2}

    def test_quoted_question_mark_kept(self) -> None:
        clause = to_text_clause(("name = '?' AND age = ?", 3))
        assert clause.text == "name = '?' AND age = :p0"

    def test_colons_escaped(self) -> None:
        clause = to_text_clause("at = '12:30'")
        assert str(clause) == "at = '12:30'"
        assert clause.compile().params == {}

    def test_count_mismatch(self) -> None:
        with pytest.raises(InvalidFragmentError) as exc_info:
            to_text_clause(("a = ? AND b = ?", 1))
        assert exc_info.value.placeholders == 2
        assert exc_info.value.params == 1

    def test_render(self) -> None:
        assert render(("a = ? AND b = ?", 1, "x")) == "a = 1 AND b = 'x'"


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


class TestBuildStatement:
    def test_empty_options(self, person_model: type) -> None:
        assert build_statement(person_model, {}) == SqlFragment("SELECT people.* FROM people")

    def test_all_clauses(self, person_model: type) -> None:
        statement = build_statement(
            person_model,
            {
                "select": SqlFragment("DISTINCT people.*"),
                "joins": SqlFragment("JOIN companies ON companies.id = people.company_id"),
                "conditions": SqlFragment("(people.age > ?)", (18,)),
                "group": SqlFragment("people.id HAVING (COUNT(*) > ?)", (0,)),
                "order": "people.name",
            },
        )
        assert statement == SqlFragment(
            "SELECT DISTINCT people.* FROM people"
            " JOIN companies ON companies.id = people.company_id"
            " WHERE (people.age > ?)"
            " GROUP BY people.id HAVING (COUNT(*) > ?)"
            " ORDER BY people.name",
            (18, 0),
        )


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class TestExecution:
    def test_find_all_without_options(self, session: Session, person_model: type) -> None:
        assert len(find_all(session, person_model, {})) == 4

    def test_min_age(
        self, session: Session, person_model: type, search_class: type[Search]
    ) -> None:
        options = search_class(min_age=18).find_options()
        assert _names(find_all(session, person_model, options)) == [
            "Alice Martin",
            "Carol Bonnet",
        ]

    def test_min_age_and_keyword(
        self, session: Session, person_model: type, search_class: type[Search]
    ) -> None:
        options = search_class(min_age=18, keyword="paris -alice").find_options()
        assert _names(find_all(session, person_model, options)) == ["Carol Bonnet"]

    def test_null_equality(
        self, session: Session, person_model: type, search_class: type[Search]
    ) -> None:
        options = search_class(city=None).find_options()
        assert _names(find_all(session, person_model, options)) == ["Dave Petit"]

    def test_neq_includes_nulls(
        self, session: Session, person_model: type, search_class: type[Search]
    ) -> None:
        search_class.search_accessor("not_city", operator="neq", column="city")
        options = search_class(not_city="Paris").find_options()
        assert _names(find_all(session, person_model, options)) == ["Bob Durand", "Dave Petit"]

    def test_joins(
        self, session: Session, person_model: type, search_class: type[Search]
    ) -> None:
        options = search_class(company="Acme").find_options()
        assert _names(find_all(session, person_model, options)) == [
            "Alice Martin",
            "Bob Durand",
        ]

    def test_order(self, session: Session, person_model: type) -> None:
        people = find_all(session, person_model, {"order": "people.age DESC"})
        assert [person.age for person in people][:3] == [45, 33, 17]

    def test_include(self, session: Session, person_model: type) -> None:
        people = find_all(session, person_model, {"include": ["company"]})
        for person in people:
            assert "company" not in sa_inspect(person).unloaded

    def test_unknown_include(self, session: Session, person_model: type) -> None:
        with pytest.raises(InvalidFindOptionError):
            find_all(session, person_model, {"include": ["pets"]})

    def test_count(
        self, session: Session, person_model: type, search_class: type[Search]
    ) -> None:
        assert count(session, person_model, {}) == 4
        assert count(session, person_model, search_class(city="Paris").find_options()) == 2
        assert count(session, person_model, search_class(company="Acme").find_options()) == 2

    def test_group_and_having(self, session: Session, person_model: type) -> None:
        options = {
            "group": SqlFragment("people.city HAVING (COUNT(*) > ?)", (1,)),
            "select": SqlFragment("MIN(people.id) AS id, people.city AS city"),
        }
        assert count(session, person_model, options) == 1
