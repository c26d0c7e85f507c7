"""Unit tests for shared query-string schemas."""

from __future__ import annotations

import pytest
from evcharging.schemas.common import PaginationQuerySchema, SortQuerySchema, split_sort_param
from marshmallow import ValidationError


class TestSortParsing:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("", []),
            (None, []),
            ("nic", ["nic"]),
            (" -nic , email ,", ["-nic", "email"]),
            (["-nic", " email "], ["-nic", "email"]),
        ],
    )
    def test_split_sort_param(self, raw, expected):
        assert split_sort_param(raw) == expected

    def test_sort_schema_splits_tokens(self):
        assert SortQuerySchema().load({"sort": "-created_at,nic"}) == {"sort": ["-created_at", "nic"]}


class TestPaginationQuerySchema:
    def test_sort_and_defaults(self):
        data = PaginationQuerySchema().load({"sort": "-nic,email"})

        assert data["sort"] == ["-nic", "email"]
        assert data["page"] == 1
        assert data["limit"] == 20

    def test_missing_sort_is_empty_list(self):
        assert PaginationQuerySchema().load({})["sort"] == []

    def test_limit_is_capped(self):
        data = PaginationQuerySchema(max_limit=50).load({"limit": "500", "page": "3"})

        assert data["limit"] == 50
        assert data["page"] == 3

    def test_page_must_be_positive(self):
        with pytest.raises(ValidationError) as exc:
            PaginationQuerySchema().load({"page": "0"})
        assert "page" in exc.value.messages
