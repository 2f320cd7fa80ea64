"""
Unit Tests for shared input validation and pagination
"""
import pytest

from campusbuddy.core.exceptions import ValidationError
from campusbuddy.models.lost_found import LostFoundStatus
from campusbuddy.schemas.common import build_page
from campusbuddy.services.validation import (
    coerce_int,
    optional_choice,
    page_params,
    require_choice,
    require_fields,
    require_text,
    validate_batch,
)


class TestRequireText:

    def test_returns_trimmed_text(self):
        assert require_text("  hello  ", "required") == "hello"

    @pytest.mark.parametrize("value", [None, "", "   ", 42])
    def test_rejects_blank_or_non_string(self, value):
        with pytest.raises(ValidationError) as exc_info:
            require_text(value, "Message content is required", "content")

        assert exc_info.value.message == "Message content is required"
        assert exc_info.value.status_code == 400


class TestRequireFields:

    def test_all_present(self):
        require_fields("missing", title="a", content="b")

    def test_reports_shared_message(self):
        with pytest.raises(ValidationError) as exc_info:
            require_fields("Title and content are required", title="a", content=" ")

        assert exc_info.value.message == "Title and content are required"


class TestChoices:

    def test_require_choice_by_value(self):
        assert require_choice("lost", LostFoundStatus, "bad") == LostFoundStatus.LOST

    def test_require_choice_rejects_unknown(self):
        with pytest.raises(ValidationError):
            require_choice("misplaced", LostFoundStatus, "bad")

    def test_optional_choice_defaults_when_blank(self):
        assert optional_choice("", LostFoundStatus, LostFoundStatus.FOUND, "bad") == LostFoundStatus.FOUND
        assert optional_choice(None, LostFoundStatus, LostFoundStatus.FOUND, "bad") == LostFoundStatus.FOUND


class TestBatch:

    @pytest.mark.parametrize("batch", ["22L-6619", "19F-0001", "23K-1234"])
    def test_valid_batches(self, batch):
        assert validate_batch(batch) == batch

    @pytest.mark.parametrize("batch", ["22l-6619", "2L-6619", "22L6619", "22LL-6619", "22L-661"])
    def test_invalid_batches(self, batch):
        with pytest.raises(ValidationError) as exc_info:
            validate_batch(batch)

        assert exc_info.value.message == "Batch must be in format XXY-XXXX (e.g., 22L-6619)"

    def test_missing_batch(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_batch(None)

        assert exc_info.value.message == "Batch is required"


class TestPagination:

    def test_coerce_int_fallbacks(self):
        assert coerce_int("7", 1) == 7
        assert coerce_int("abc", 1) == 1
        assert coerce_int(None, 20) == 20
        assert coerce_int("-3", 20) == 20
        assert coerce_int("0", 20) == 20

    def test_page_params_caps_limit(self):
        assert page_params("2", "500") == (2, 100)
        assert page_params(None, None, default_limit=50) == (1, 50)

    def test_has_more_when_items_remain(self):
        page = build_page(["a", "b"], total=5, page=1, limit=2)

        assert page.has_more is True

    def test_has_more_false_on_last_page(self):
        page = build_page(["e"], total=5, page=3, limit=2)

        assert page.has_more is False

    def test_has_more_uses_returned_items(self):
        # Short page (e.g. rows deleted between count and read) ends pagination
        page = build_page(["a"], total=2, page=2, limit=1)

        assert page.has_more is False

    def test_page_serialises_camel_case(self):
        dumped = build_page([], total=0, page=1, limit=20).model_dump(by_alias=True)

        assert dumped == {"data": [], "total": 0, "page": 1, "limit": 20, "hasMore": False}
