"""Tests for BaseDAO — CRUD plus the page-based and keyset executors."""

import pytest
from sqlalchemy import select

from orderhub.dao.base import BaseDAO
from orderhub.dao.item_dao import ItemDAO
from orderhub.dao.user_dao import UserDAO
from orderhub.models import Item, User
from orderhub.query import parse_cursor_params, parse_page_params
from orderhub.query.resources import (
    ITEMS,
    USERS,
    FilterOp,
    ResourceConfig,
    filters,
    sortable,
)


@pytest.fixture
def user_dao():
    return UserDAO()


@pytest.fixture
def item_dao():
    return ItemDAO()


def _names(page) -> list[str]:
    return [row.name for row in page.data]


def _ids(page) -> list[str]:
    return [row.id for row in page.data]


# ── CRUD ─────────────────────────────────────────────────────────────────


class TestCrud:
    async def test_create_assigns_id_and_timestamps(self, session, user_dao):
        user = await user_dao.create(session, email="ann@example.com", name="Ann")
        assert len(user.id) == 36
        assert user.created_at is not None
        assert await user_dao.get_by_id(session, user.id) is user

    async def test_update(self, session, user_dao, people):
        updated = await user_dao.update(session, "u-bob", name="Robert")
        assert updated.name == "Robert"

    async def test_update_missing_returns_none(self, session, user_dao):
        assert await user_dao.update(session, "nope", name="x") is None

    async def test_update_immutable_column(self, session, user_dao, people):
        with pytest.raises(AttributeError, match="immutable"):
            await user_dao.update(session, "u-bob", created_at=None)

    async def test_update_unknown_column(self, session, user_dao, people):
        with pytest.raises(AttributeError, match="has no column"):
            await user_dao.update(session, "u-bob", nickname="bobby")

    async def test_delete_and_exists(self, session, user_dao, people):
        assert await user_dao.exists(session, "u-bob")
        assert await user_dao.delete(session, "u-bob")
        assert not await user_dao.exists(session, "u-bob")
        assert not await user_dao.delete(session, "u-bob")

    async def test_blank_pk_rejected(self, session, user_dao):
        with pytest.raises(ValueError):
            await user_dao.get_by_id(session, " ")

    async def test_get_by_field(self, session, user_dao, people):
        user = await user_dao.get_by_email(session, "joanna@example.com")
        assert user.id == "u-joanna"
        with pytest.raises(ValueError):
            await user_dao.get_by_field(session)


# ── page-based executor ──────────────────────────────────────────────────


class TestPaginatePages:
    async def test_like_filter_with_ordering(self, session, user_dao, people):
        opts = parse_page_params({"name": "jo", "ordering": "name"})
        page = await user_dao.list_paginated(session, opts, USERS)
        assert _names(page) == ["Joanna", "John"]
        assert page.total == 2
        assert not page.has_next_page
        assert not page.has_prev_page

    async def test_default_ordering(self, session, user_dao, people):
        page = await user_dao.list_paginated(session, parse_page_params({"limit": "2"}), USERS)
        assert _names(page) == ["Bob", "Joanna"]
        assert page.total == 3
        assert page.has_next_page

    async def test_descending_ordering(self, session, user_dao, people):
        opts = parse_page_params({"ordering": "-created_at"})
        page = await user_dao.list_paginated(session, opts, USERS)
        assert _names(page) == ["Bob", "Joanna", "John"]

    async def test_unknown_filter_is_noop(self, session, user_dao, people):
        page = await user_dao.list_paginated(
            session, parse_page_params({"nickname": "x"}), USERS
        )
        assert page.total == 3

    async def test_unknown_sort_field_uses_default(self, session, user_dao, people):
        page = await user_dao.list_paginated(
            session, parse_page_params({"ordering": "-password"}), USERS
        )
        assert _names(page) == ["Bob", "Joanna", "John"]

    async def test_filter_case_insensitive(self, session, user_dao, people):
        page = await user_dao.list_paginated(session, parse_page_params({"name": "JO"}), USERS)
        assert page.total == 2

    async def test_last_page(self, session, item_dao, catalogue):
        opts = parse_page_params({"from_page": "3", "limit": "10"})
        page = await item_dao.paginate_pages(session, select(Item), opts, ITEMS)
        assert page.total == 25
        assert len(page.data) == 5
        assert not page.has_next_page
        assert page.has_prev_page
        assert (page.from_page, page.to_page, page.limit) == (3, 3, 10)

    async def test_middle_page(self, session, item_dao, catalogue):
        opts = parse_page_params({"from_page": "2", "limit": "10"})
        page = await item_dao.paginate_pages(session, select(Item), opts, ITEMS)
        assert page.has_next_page and page.has_prev_page
        # default ordering is newest first
        assert _ids(page)[0] == "item-14"

    async def test_past_the_end(self, session, item_dao, catalogue):
        opts = parse_page_params({"from_page": "9", "limit": "10"})
        page = await item_dao.paginate_pages(session, select(Item), opts, ITEMS)
        assert page.data == []
        assert page.total == 25
        assert not page.has_next_page

    async def test_huge_from_page_is_past_the_end(self, session, item_dao, catalogue):
        opts = parse_page_params({"from_page": "99999999999999999999", "limit": "10"})
        page = await item_dao.paginate_pages(session, select(Item), opts, ITEMS)
        assert page.data == []
        assert page.total == 25
        assert page.has_prev_page
        assert not page.has_next_page

    @pytest.mark.parametrize(("needle", "expected"), [("_", ["snake_case"]), ("%", ["100% Bob"])])
    async def test_like_wildcards_match_literally(
        self, session, user_dao, people, needle, expected
    ):
        session.add_all(
            [
                User(id="u-snake", email="snake@example.com", name="snake_case"),
                User(id="u-pct", email="pct@example.com", name="100% Bob"),
            ]
        )
        await session.flush()
        page = await user_dao.list_paginated(session, parse_page_params({"name": needle}), USERS)
        assert _names(page) == expected

    async def test_range_filter_total(self, session, item_dao, catalogue):
        opts = parse_page_params({"min_price": "40"})
        page = await item_dao.paginate_pages(session, select(Item), opts, ITEMS)
        assert page.total == 10
        assert all(item.price >= 40 for item in page.data)

    async def test_map(self, session, user_dao, people):
        page = await user_dao.list_paginated(session, parse_page_params({}), USERS)
        mapped = page.map(lambda u: u.email)
        assert mapped.data[0] == "bob@example.com"
        assert mapped.total == page.total


# ── keyset executor ──────────────────────────────────────────────────────


class TestPaginateCursor:
    async def test_first_page(self, session, item_dao, catalogue):
        page = await item_dao.list_paginated(session, parse_cursor_params({}), ITEMS)
        assert _ids(page) == [f"item-{n:02d}" for n in range(24, 14, -1)]
        assert page.has_next_page
        assert page.next_cursor is not None
        assert not page.has_prev_page
        assert page.prev_cursor is None

    async def test_walk_forward_then_back(self, session, item_dao, catalogue):
        first = await item_dao.list_paginated(session, parse_cursor_params({}), ITEMS)
        second = await item_dao.list_paginated(
            session, parse_cursor_params({"cursor": first.next_cursor}), ITEMS
        )
        assert _ids(second) == [f"item-{n:02d}" for n in range(14, 4, -1)]
        assert second.has_prev_page and second.has_next_page

        third = await item_dao.list_paginated(
            session, parse_cursor_params({"cursor": second.next_cursor}), ITEMS
        )
        assert _ids(third) == [f"item-{n:02d}" for n in range(4, -1, -1)]
        assert not third.has_next_page
        assert third.next_cursor is None
        assert third.has_prev_page

        back = await item_dao.list_paginated(
            session,
            parse_cursor_params({"cursor": third.prev_cursor, "direction": "backward"}),
            ITEMS,
        )
        assert _ids(back) == _ids(second)
        assert back.has_next_page and back.has_prev_page

        start = await item_dao.list_paginated(
            session,
            parse_cursor_params({"cursor": back.prev_cursor, "direction": "backward"}),
            ITEMS,
        )
        assert _ids(start) == _ids(first)
        assert not start.has_prev_page
        assert start.prev_cursor is None

    async def test_ties_are_neither_skipped_nor_repeated(self, session, item_dao, catalogue):
        seen: list[str] = []
        params = {"sortBy": "price", "order": "asc", "limit": "7"}
        while True:
            page = await item_dao.list_paginated(session, parse_cursor_params(params), ITEMS)
            seen.extend(_ids(page))
            if not page.has_next_page:
                break
            params = {**params, "cursor": page.next_cursor}
        by_price = sorted(catalogue, key=lambda item: (item.price, item.id))
        assert seen == [item.id for item in by_price]

    async def test_exact_fit_has_no_next(self, session, item_dao, catalogue):
        page = await item_dao.list_paginated(session, parse_cursor_params({"limit": "25"}), ITEMS)
        assert len(page.data) == 25
        assert not page.has_next_page

    async def test_filter_applies(self, session, item_dao, catalogue):
        opts = parse_cursor_params({"max_price": "10", "sortBy": "name"})
        page = await item_dao.list_paginated(session, opts, ITEMS)
        assert _ids(page) == ["item-00", "item-05", "item-10", "item-15", "item-20"]
        assert not page.has_next_page

    async def test_invalid_cursor_restarts_from_top(self, session, item_dao, catalogue):
        opts = parse_cursor_params({"cursor": "bogus"})
        page = await item_dao.list_paginated(session, opts, ITEMS)
        assert _ids(page)[0] == "item-24"
        assert not page.has_prev_page

    async def test_empty_result(self, session, item_dao):
        page = await item_dao.list_paginated(session, parse_cursor_params({}), ITEMS)
        assert page.data == []
        assert page.next_cursor is None and page.prev_cursor is None


async def test_base_dao_subclass_declares_model(session, people):
    class NamedUsers(BaseDAO[User]):
        model = User

    assert (await NamedUsers().get_by_id(session, "u-john")).name == "John"


# ── documented scenarios (users sorted newest first by default) ─────────


NEWEST_FIRST_USERS = ResourceConfig(
    name="users",
    sort_config=sortable(User, "name", "created_at"),
    filter_config=filters(FilterOp.LIKE, name=User.name),
    cursor_column=User.id,
    default_ordering="-created_at",
)


class TestScenarios:
    async def test_filtered_and_sorted(self, session, user_dao, people):
        opts = parse_page_params({"from_page": "1", "limit": "2", "ordering": "name", "name": "jo"})
        page = await user_dao.list_paginated(session, opts, NEWEST_FIRST_USERS)
        assert _names(page) == ["Joanna", "John"]
        assert page.total == 2
        assert not page.has_next_page and not page.has_prev_page

    async def test_default_ordering_newest_first(self, session, user_dao, people):
        opts = parse_page_params({"from_page": "1", "limit": "1"})
        page = await user_dao.list_paginated(session, opts, NEWEST_FIRST_USERS)
        assert _names(page) == ["Bob"]
        assert page.total == 3
        assert page.has_next_page

    async def test_unknown_filter_matches_unfiltered(self, session, user_dao, people):
        plain = await user_dao.list_paginated(session, parse_page_params({}), NEWEST_FIRST_USERS)
        noisy = await user_dao.list_paginated(
            session, parse_page_params({"foo": "bar"}), NEWEST_FIRST_USERS
        )
        assert noisy == plain

    async def test_second_page_has_prev(self, session, user_dao, people):
        opts = parse_page_params({"from_page": "2", "limit": "2"})
        page = await user_dao.list_paginated(session, opts, NEWEST_FIRST_USERS)
        assert _names(page) == ["John"]
        assert page.has_prev_page and not page.has_next_page

    async def test_identical_query_identical_envelope(self, session, item_dao, catalogue):
        opts = parse_cursor_params({"sortBy": "price", "limit": "4"})
        first = await item_dao.list_paginated(session, opts, ITEMS)
        again = await item_dao.list_paginated(session, opts, ITEMS)
        assert first == again
