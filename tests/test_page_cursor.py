import pytest

from datagrid.models import FetchParams, FilterDirective, RecordPage, SortDirective
from datagrid.services.page_cursor import PageCursor, page_window, total_pages_for


def _page(total, index=1, size=10):
    return RecordPage(items=(), page_index=index, page_size=size, total_count=total)


def test_reconcile_keeps_valid_page():
    cursor = PageCursor(page_size=10)
    cursor.request(3)
    state = cursor.reconcile(_page(23, 3))
    assert (state.current_page, state.total_pages, state.total_count) == (3, 3, 23)


def test_page_size_change_resets_to_first_page():
    cursor = PageCursor(page_size=10)
    cursor.request(3)
    cursor.reconcile(_page(23, 3))
    params = cursor.request(page_size=20)
    assert params.page_index == 1
    state = cursor.reconcile(_page(23, 1, 20))
    assert (state.current_page, state.total_pages) == (1, 2)


def test_page_size_change_wins_over_requested_index():
    cursor = PageCursor(page_size=10)
    params = cursor.request(4, 50)
    assert (params.page_index, params.page_size) == (1, 50)


def test_reconcile_clamps_past_last_page():
    cursor = PageCursor(page_size=10)
    cursor.request(9)
    state = cursor.reconcile(_page(23, 9))
    assert state.current_page == 3


def test_reconcile_empty_collection():
    cursor = PageCursor(page_size=10)
    cursor.request(2)
    state = cursor.reconcile(_page(0))
    assert (state.current_page, state.total_pages) == (1, 0)
    assert cursor.visible_range() == (0, 0)


def test_reconcile_negative_total_treated_as_zero():
    cursor = PageCursor(page_size=5)
    assert cursor.reconcile(_page(-4)).total_count == 0


@pytest.mark.parametrize("total", [0, 1, 9, 10, 11, 99, 100, 101])
@pytest.mark.parametrize("size", [1, 3, 10, 50])
@pytest.mark.parametrize("wanted", [1, 2, 7, 1000])
def test_clamp_property(total, size, wanted):
    cursor = PageCursor(page_size=size)
    cursor.request(wanted)
    state = cursor.reconcile(_page(total, wanted, size))
    assert 1 <= state.current_page <= max(1, total_pages_for(total, size))


def test_reconcile_is_idempotent():
    cursor = PageCursor(page_size=10)
    cursor.request(5)
    page = _page(42, 5)
    assert cursor.reconcile(page) == cursor.reconcile(page)


def test_invalid_page_size_ignored():
    cursor = PageCursor(page_size=10)
    cursor.request(2)
    params = cursor.request(page_size=0)
    assert (params.page_index, params.page_size) == (2, 10)
    assert PageCursor(page_size=-3).page_size >= 1


def test_request_carries_directives():
    cursor = PageCursor(page_size=15)
    params = cursor.request(2, sort=SortDirective("key", "desc"), filters=[FilterDirective("status", "Done")])
    assert params == FetchParams(2, 15, SortDirective("key", "desc"), (FilterDirective("status", "Done"),))
    assert params.offset == 15
    query = params.to_query()
    assert query["startAt"] == 15
    assert query["sortDirection"] == "desc"
    assert query["filter.status"] == "Done"


def test_navigation_helpers():
    cursor = PageCursor(page_size=10)
    cursor.reconcile(_page(23))
    assert cursor.has_previous() is False
    assert cursor.next_page() == 2
    assert cursor.next_page() == 3
    assert cursor.next_page() == 3
    assert cursor.has_next() is False
    assert cursor.go_to(99) == 3
    assert cursor.previous_page() == 2
    assert cursor.visible_range() == (11, 20)


def test_last_page_visible_range():
    cursor = PageCursor(page_size=10)
    cursor.request(3)
    cursor.reconcile(_page(23, 3))
    assert cursor.visible_range() == (21, 23)


def test_page_window_shapes():
    assert page_window(1, 4) == [1, 2, 3, 4]
    assert page_window(2, 10) == [1, 2, 3, 4, 5, "...", 10]
    assert page_window(9, 10) == [1, "...", 6, 7, 8, 9, 10]
    assert page_window(5, 10) == [1, "...", 3, 4, 5, 6, 7, "...", 10]


def test_record_page_from_records():
    records = list(range(23))
    page = RecordPage.from_records(records, 3, 10)
    assert page.items == (20, 21, 22)
    assert page.total_count == 23
