import pytest

from petads.exceptions.base import InvalidFieldError
from petads.services.pagination import (
    DEFAULT_CATEGORY_ID,
    compute_offset,
    extract_total,
    resolve_category_id,
)


@pytest.mark.parametrize(
    "page, page_size, expected",
    [(1, 10, 0), (2, 10, 10), (3, 25, 50), (1, 1, 0)],
)
def test_compute_offset(page, page_size, expected):
    assert compute_offset(page, page_size) == expected


@pytest.mark.parametrize(
    "page, page_size, fields",
    [(0, 10, ["page"]), (1, 0, ["page_size"]), (-2, -1, ["page", "page_size"]), (None, 10, ["page"])],
)
def test_compute_offset_rejects_non_positive(page, page_size, fields):
    with pytest.raises(InvalidFieldError) as exc_info:
        compute_offset(page, page_size)

    assert exc_info.value.fields == fields


class TestResolveCategoryId:

    def test_first_row_id(self):
        assert resolve_category_id([{"id": 4}]) == 4

    def test_no_rows_falls_back_to_default(self):
        assert resolve_category_id([]) == DEFAULT_CATEGORY_ID == 1

    def test_null_id_falls_back_to_default(self):
        assert resolve_category_id([{"id": None}]) == DEFAULT_CATEGORY_ID


class TestExtractTotal:

    def test_count_column(self):
        assert extract_total([{"count": 15}]) == 15

    def test_empty_result_is_zero(self):
        assert extract_total([]) == 0
