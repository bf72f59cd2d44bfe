import uuid
from datetime import timedelta

import pytest

from pvz.errors import InvalidCityError, InvalidDateRangeError, PickupPointNotFoundError
from pvz.models import AuditEvent
from pvz.services import inventory_service, pickup_point_service, reception_service
from pvz.time_utils import utcnow


def test_create_pickup_point(db_session):
    pickup_point = pickup_point_service.create_pickup_point("  Санкт-Петербург ")

    assert pickup_point.city == "Санкт-Петербург"
    assert pickup_point.registration_date is not None
    assert pickup_point_service.get_pickup_point(pickup_point.id).id == pickup_point.id


@pytest.mark.parametrize("city", [None, "", "М", "Новосибирск", "x" * 101])
def test_create_rejects_invalid_city(db_session, city):
    with pytest.raises(InvalidCityError):
        pickup_point_service.create_pickup_point(city)


def test_whitelist_can_be_disabled(app, db_session):
    previous = app.config["PVZ_ALLOWED_CITIES"]
    app.config["PVZ_ALLOWED_CITIES"] = ()
    try:
        pickup_point = pickup_point_service.create_pickup_point("Новосибирск")
    finally:
        app.config["PVZ_ALLOWED_CITIES"] = previous

    assert pickup_point.city == "Новосибирск"


def test_get_unknown_pickup_point(db_session):
    with pytest.raises(PickupPointNotFoundError):
        pickup_point_service.get_pickup_point(uuid.uuid4())


def test_rename_pickup_point(db_session, pickup_point):
    renamed = pickup_point_service.rename_pickup_point(pickup_point.id, "Казань")

    assert renamed.city == "Казань"
    event = db_session.query(AuditEvent).filter_by(event_type="pickup_point.renamed").one()
    assert event.note == "Renamed from Москва to Казань"


def test_rename_validates_before_lookup(db_session):
    with pytest.raises(InvalidCityError):
        pickup_point_service.rename_pickup_point(uuid.uuid4(), "Новосибирск")
    with pytest.raises(PickupPointNotFoundError):
        pickup_point_service.rename_pickup_point(uuid.uuid4(), "Казань")


def test_list_pickup_points_paginates(db_session):
    for city in ("Москва", "Казань", "Москва"):
        pickup_point_service.create_pickup_point(city)

    assert len(pickup_point_service.list_pickup_points(offset=0, limit=2)) == 2
    assert len(pickup_point_service.list_pickup_points(offset=2, limit=2)) == 1


def test_with_receptions_nests_receptions_and_products(db_session, pickup_point, other_pickup_point):
    reception = reception_service.open_reception(pickup_point.id)
    inventory_service.add_products(reception.id, ["food", "other"])

    items = pickup_point_service.list_pickup_points_with_receptions(offset=0, limit=10)

    by_id = {item["pvz"]["id"]: item for item in items}
    assert set(by_id) == {str(pickup_point.id), str(other_pickup_point.id)}
    assert by_id[str(other_pickup_point.id)]["receptions"] == []

    [entry] = by_id[str(pickup_point.id)]["receptions"]
    assert entry["reception"]["id"] == str(reception.id)
    assert entry["reception"]["status"] == "in_progress"
    assert [p["type"] for p in entry["products"]] == ["food", "other"]


def test_with_receptions_date_range(db_session, pickup_point, other_pickup_point):
    reception_service.open_reception(pickup_point.id)
    now = utcnow()

    items = pickup_point_service.list_pickup_points_with_receptions(
        start_date=now - timedelta(hours=1),
        end_date=now + timedelta(hours=1),
    )
    assert [item["pvz"]["id"] for item in items] == [str(pickup_point.id)]

    future = pickup_point_service.list_pickup_points_with_receptions(
        start_date=now + timedelta(days=1),
    )
    assert future == []


def test_with_receptions_rejects_inverted_range(db_session):
    now = utcnow()
    with pytest.raises(InvalidDateRangeError):
        pickup_point_service.list_pickup_points_with_receptions(
            start_date=now, end_date=now - timedelta(seconds=1)
        )
