import pytest

from bloodlink import blood_requests
from bloodlink.errors import ValidationFailure


@pytest.fixture
def owner(make_user):
    return make_user(name="Owner", role="patient")


def _create(db, owner, **overrides):
    data = {
        "blood_type": "A+",
        "location": "General Hospital",
        "contact": "0123456789",
        "urgency": "medium",
    }
    data.update(overrides)
    return blood_requests.create(db, owner, data)


def test_orders_by_urgency_before_creation_time(db, owner):
    low = _create(db, owner, urgency="low")
    high = _create(db, owner, urgency="high")
    medium = _create(db, owner, urgency="medium")

    items, _ = blood_requests.list_requests(db)
    assert [r.id for r in items] == [high.id, medium.id, low.id]


def test_urgency_ties_are_newest_first(db, owner):
    first = _create(db, owner, urgency="high")
    second = _create(db, owner, urgency="high")
    third = _create(db, owner, urgency="low")
    fourth = _create(db, owner, urgency="low")

    items, _ = blood_requests.list_requests(db)
    assert [r.id for r in items] == [second.id, first.id, fourth.id, third.id]


def test_paginates_with_page_info(db, owner):
    for _ in range(25):
        _create(db, owner)

    items, info = blood_requests.list_requests(db, page=1, limit=10)
    assert len(items) == 10
    assert (info.current_page, info.total_pages, info.total) == (1, 3, 25)
    assert info.has_next is True and info.has_prev is False

    items, info = blood_requests.list_requests(db, page=3, limit=10)
    assert len(items) == 5
    assert info.has_next is False and info.has_prev is True
    assert info.total_pages == 3

    items, info = blood_requests.list_requests(db, page=4, limit=10)
    assert items == []
    assert info.has_next is False


def test_pages_do_not_overlap(db, owner):
    for i in range(12):
        _create(db, owner, urgency=("low", "medium", "high")[i % 3])
    seen = []
    for page in (1, 2, 3):
        items, _ = blood_requests.list_requests(db, page=page, limit=5)
        seen.extend(r.id for r in items)
    assert len(seen) == len(set(seen)) == 12


def test_empty_listing(db):
    items, info = blood_requests.list_requests(db)
    assert items == []
    assert (info.total, info.total_pages, info.has_next, info.has_prev) == (0, 0, False, False)


def test_page_size_is_capped(db, owner):
    for _ in range(3):
        _create(db, owner)
    _, info = blood_requests.list_requests(db, limit=500)
    assert info.total_pages == 1

    with pytest.raises(ValidationFailure):
        blood_requests.list_requests(db, page=0)
    with pytest.raises(ValidationFailure):
        blood_requests.list_requests(db, limit=0)


def test_filters_combine(db, owner):
    match = _create(db, owner, blood_type="O-", urgency="high", location="City Hospital")
    _create(db, owner, blood_type="O-", urgency="low", location="City Hospital")
    _create(db, owner, blood_type="B+", urgency="high", location="City Hospital")
    _create(db, owner, blood_type="O-", urgency="high", location="Rural Clinic")

    items, info = blood_requests.list_requests(
        db, {"blood_type": "O-", "urgency": "high", "location": "city"}
    )
    assert [r.id for r in items] == [match.id]
    assert info.total == 1


def test_location_filter_is_case_insensitive_substring(db, owner):
    a = _create(db, owner, location="St. Mary's Hospital, Springfield")
    _create(db, owner, location="Shelbyville Clinic")
    items, _ = blood_requests.list_requests(db, {"location": "SPRINGF"})
    assert [r.id for r in items] == [a.id]


def test_location_filter_treats_wildcards_literally(db, owner):
    _create(db, owner, location="Metro Hospital")
    items, _ = blood_requests.list_requests(db, {"location": "%"})
    assert items == []
    items, _ = blood_requests.list_requests(db, {"location": "Metro_Hospital"})
    assert items == []


def test_invalid_filter_values_are_rejected(db):
    with pytest.raises(ValidationFailure):
        blood_requests.list_requests(db, {"blood_type": "Z"})
    with pytest.raises(ValidationFailure):
        blood_requests.list_requests(db, {"urgency": "urgent"})


def test_inactive_requests_are_not_listed(db, owner):
    fulfilled = _create(db, owner)
    withdrawn = _create(db, owner)
    open_one = _create(db, owner)
    blood_requests.fulfill(db, fulfilled.id, owner.id)
    blood_requests.withdraw(db, withdrawn.id, owner.id)

    items, info = blood_requests.list_requests(db)
    assert [r.id for r in items] == [open_one.id]
    assert info.total == 1
    assert [r.id for r in blood_requests.list_own(db, owner.id)] == [open_one.id]


def test_list_own_only_returns_callers_requests(db, owner, make_user):
    other = make_user(name="Other")
    mine_old = _create(db, owner, urgency="high")
    _create(db, other)
    mine_new = _create(db, owner, urgency="low")
    assert [r.id for r in blood_requests.list_own(db, owner.id)] == [mine_new.id, mine_old.id]


def test_page_far_past_the_end_is_empty(db, owner):
    _create(db, owner)
    items, info = blood_requests.list_requests(db, page=10**18, limit=10)
    assert items == []
    assert info.total == 1
    assert info.has_next is False and info.has_prev is True
