# tests/unit/test_lookup_service.py
import pytest

from product_registry.core.exceptions import NotFound, ValidationError
from product_registry.services.registry.lookup_service import LookupService
from product_registry.utils.pagination_utils import (
    create_pagination_metadata, descending_id_window, validate_pagination_params
)


@pytest.fixture
def populated(registry, manufacturer):
    for n in range(1, 13):
        registry.create(f"B{n}", "cert", "origin", 1700000000 + n, manufacturer)
    return LookupService(registry, max_page_size=5)


def test_list_is_newest_first_beyond_ten_products(populated):
    products = populated.list(0, 5)
    assert [p.id for p in products] == [12, 11, 10, 9, 8]


def test_list_offsets_walk_every_product(populated):
    seen = []
    offset = 0
    while True:
        page = populated.list(offset, 5)
        if not page:
            break
        seen.extend(p.id for p in page)
        offset += len(page)
    assert seen == list(range(12, 0, -1))


def test_limit_is_clamped(populated):
    assert len(populated.list(0, 500)) == 5


def test_page_carries_explicit_count(populated):
    result = populated.page(10, 5)
    assert [p['id'] for p in result['products']] == [2, 1]
    assert result['pagination']['total_items'] == 12
    assert result['pagination']['has_next'] is False
    assert result['pagination']['prev_offset'] == 5


def test_offset_past_end_is_empty(populated):
    assert populated.list(50, 5) == []


def test_empty_registry(registry):
    lookup = LookupService(registry)
    assert lookup.count() == 0
    assert lookup.list() == []
    with pytest.raises(NotFound):
        lookup.get(1)


@pytest.mark.parametrize("offset,limit", [(-1, 5), (0, 0), (0, -2), ("x", 5)])
def test_bad_pagination_is_rejected(populated, offset, limit):
    with pytest.raises(ValidationError):
        populated.list(offset, limit)


def test_get_accepts_decimal_strings(populated):
    assert populated.get("3").batch_id == "B3"


def test_validate_pagination_defaults():
    assert validate_pagination_params(None, '') == {'offset': 0, 'limit': 20}
    assert validate_pagination_params('4', '7', max_limit=5) == {'offset': 4, 'limit': 5}


def test_pagination_metadata():
    meta = create_pagination_metadata(total_count=30, offset=10, limit=10)
    assert meta['has_next'] is True
    assert meta['next_offset'] == 20
    assert meta['has_prev'] is True


def test_descending_window():
    assert list(descending_id_window(12, 0, 5)) == [12, 11, 10, 9, 8]
    assert list(descending_id_window(12, 10, 5)) == [2, 1]
    assert list(descending_id_window(3, 3, 5)) == []
    assert list(descending_id_window(0, 0, 5)) == []
