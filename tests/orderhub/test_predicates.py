"""Tests for predicate nodes and their SQL rendering."""

from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from orderhub.models import Item, Order, User
from orderhub.query.predicates import (
    Between,
    Eq,
    Gte,
    In,
    Like,
    Lte,
    ValueMismatchError,
    _adapt,
    apply_predicates,
    escape_like,
    to_clause,
)


def _sql(clause) -> str:
    return str(clause.compile(dialect=postgresql.dialect()))


class TestToClause:
    def test_like_is_case_insensitive_substring(self):
        clause = to_clause(Like(User.name, "jo"))
        assert "ILIKE" in _sql(clause)
        assert clause.right.value == "%jo%"

    def test_like_wildcards_are_escaped(self):
        clause = to_clause(Like(User.name, "50%_off"))
        assert "ESCAPE" in _sql(clause)
        assert clause.right.value == "%50\\%\\_off%"

    def test_eq(self):
        assert "users.email = " in _sql(to_clause(Eq(User.email, "a@b.c")))

    def test_range_operators(self):
        assert ">=" in _sql(to_clause(Gte(Order.total, 500)))
        assert "<=" in _sql(to_clause(Lte(Order.total, 500)))
        assert "BETWEEN" in _sql(to_clause(Between(Order.total, 100, 200)))

    def test_in(self):
        assert " IN " in _sql(to_clause(In(Order.status, ("pending", "shipped"))))

    def test_unknown_node_rejected(self):
        with pytest.raises(TypeError):
            to_clause(object())  # type: ignore[arg-type]


class TestAdapt:
    def test_number_against_text_column_becomes_text(self):
        assert _adapt(Item.sku, 42) == "42"

    def test_text_against_numeric_column_mismatch(self):
        with pytest.raises(ValueMismatchError):
            _adapt(Item.price, "cheap")

    def test_float_against_decimal_column(self):
        assert _adapt(Item.price, 12.5) == Decimal("12.5")

    def test_int_unchanged(self):
        assert _adapt(Item.price, 12) == 12


class TestApplyPredicates:
    def test_no_predicates_returns_statement_unchanged(self):
        stmt = select(User)
        assert apply_predicates(stmt, []) is stmt

    def test_predicates_are_anded(self):
        stmt = apply_predicates(
            select(Order), [Eq(Order.status, "pending"), Gte(Order.total, 100)]
        )
        sql = _sql(stmt)
        assert "orders.status = " in sql
        assert " AND " in sql

    def test_mismatched_value_is_skipped(self):
        stmt = apply_predicates(
            select(Item), [Between(Item.price, "low", 10), Like(Item.name, "box")]
        )
        sql = _sql(stmt)
        assert "BETWEEN" not in sql
        assert "ILIKE" in sql


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("jo", "jo"), ("100%", "100\\%"), ("a_b", "a\\_b"), ("c:\\tmp", "c:\\\\tmp")],
)
def test_escape_like(raw, expected):
    assert escape_like(raw) == expected
