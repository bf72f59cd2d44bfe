import logging
import uuid
from unittest import mock

from pvz.errors import CommitFailure, RollbackFailure
from pvz.services import inventory_service


def test_health(client, db_session):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json()["status"] == "healthy"


def test_create_pickup_point(client, db_session):
    response = client.post("/api/pvz", json={"city": "Казань"})

    assert response.status_code == 201
    body = response.get_json()
    assert body["city"] == "Казань"
    assert body["registration_date"].endswith("Z")


def test_create_pickup_point_invalid_city(client, db_session):
    response = client.post("/api/pvz", json={"city": "Новосибирск"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_city"


def test_get_unknown_pickup_point(client, db_session):
    response = client.get(f"/api/pvz/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.get_json()["error"] == "pickup_point_not_found"


def test_rename_pickup_point(client, pickup_point):
    response = client.patch(f"/api/pvz/{pickup_point.id}", json={"city": "Санкт-Петербург"})

    assert response.status_code == 200
    assert response.get_json()["city"] == "Санкт-Петербург"


def test_list_pickup_points_bad_limit(client, db_session):
    response = client.get("/api/pvz?limit=500")

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_pagination"


def test_list_pickup_points_with_receptions(client, pickup_point, open_reception):
    inventory_service.add_product(open_reception.id, "clothing")

    response = client.get("/api/pvz?page=1&limit=10")

    assert response.status_code == 200
    [item] = response.get_json()["items"]
    assert item["pvz"]["id"] == str(pickup_point.id)
    assert item["receptions"][0]["products"][0]["type"] == "clothing"


def test_list_pickup_points_bad_date(client, db_session):
    response = client.get("/api/pvz?start_date=yesterday")

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_date_range"


def test_open_and_close_reception(client, pickup_point):
    opened = client.post("/api/receptions", json={"pvz_id": str(pickup_point.id)})
    assert opened.status_code == 201
    assert opened.get_json()["status"] == "in_progress"
    assert opened.get_json()["pvz_id"] == str(pickup_point.id)

    current = client.get(f"/api/pvz/{pickup_point.id}/open_reception")
    assert current.status_code == 200
    assert current.get_json()["id"] == opened.get_json()["id"]

    closed = client.post(f"/api/pvz/{pickup_point.id}/close_last_reception")
    assert closed.status_code == 200
    assert closed.get_json()["status"] == "close"

    again = client.post(f"/api/pvz/{pickup_point.id}/close_last_reception")
    assert again.status_code == 409
    assert again.get_json()["error"] == "no_open_reception"


def test_open_reception_twice(client, pickup_point, open_reception):
    response = client.post("/api/receptions", json={"pvz_id": str(pickup_point.id)})

    assert response.status_code == 409
    assert response.get_json()["error"] == "reception_already_open"


def test_open_reception_bad_payload(client, db_session):
    missing = client.post("/api/receptions", json={})
    assert missing.status_code == 400

    unknown = client.post("/api/receptions", json={"pvz_id": str(uuid.uuid4())})
    assert unknown.status_code == 404


def test_reception_products_lifecycle(client, open_reception):
    base = f"/api/receptions/{open_reception.id}/products"

    assert client.post(base, json={"type": "electronics"}).status_code == 201
    batch = client.post(f"{base}/batch", json={"types": ["food", "other"]})
    assert batch.status_code == 201
    assert [p["type"] for p in batch.get_json()["items"]] == ["food", "other"]

    listed = client.get(base)
    assert [p["type"] for p in listed.get_json()["items"]] == ["electronics", "food", "other"]

    popped = client.delete(f"{base}/last")
    assert popped.status_code == 200
    assert popped.get_json()["type"] == "other"


def test_batch_rejects_invalid_type(client, open_reception):
    base = f"/api/receptions/{open_reception.id}/products"

    response = client.post(f"{base}/batch", json={"types": ["food", "spaceship"]})

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_product_type"
    assert client.get(base).get_json()["items"] == []


def test_remove_last_from_empty_reception(client, open_reception):
    response = client.delete(f"/api/receptions/{open_reception.id}/products/last")

    assert response.status_code == 409
    assert response.get_json()["error"] == "no_products_to_remove"


def test_add_product_to_closed_reception(client, pickup_point, open_reception):
    client.post(f"/api/pvz/{pickup_point.id}/close_last_reception")

    response = client.post(
        f"/api/receptions/{open_reception.id}/products", json={"type": "food"}
    )

    assert response.status_code == 409
    assert response.get_json()["error"] == "reception_already_closed"


def test_add_product_by_pickup_point(client, pickup_point, open_reception):
    added = client.post("/api/products", json={"pvz_id": str(pickup_point.id), "type": "food"})
    assert added.status_code == 201
    assert added.get_json()["reception_id"] == str(open_reception.id)

    fetched = client.get(f"/api/products/{added.get_json()['id']}")
    assert fetched.status_code == 200

    removed = client.post(f"/api/pvz/{pickup_point.id}/delete_last_product")
    assert removed.status_code == 200
    assert removed.get_json()["id"] == added.get_json()["id"]


def test_add_product_by_pickup_point_without_open_reception(client, pickup_point):
    response = client.post("/api/products", json={"pvz_id": str(pickup_point.id), "type": "food"})

    assert response.status_code == 409
    assert response.get_json()["error"] == "no_open_reception"


def test_audit_listing(client, pickup_point, open_reception):
    response = client.get(f"/api/audit?pvz_id={pickup_point.id}&event_type=reception.opened")

    assert response.status_code == 200
    [event] = response.get_json()["items"]
    assert event["entity_id"] == str(open_reception.id)


def test_batch_rejects_non_list_types(client, open_reception):
    response = client.post(
        f"/api/receptions/{open_reception.id}/products/batch", json={"types": 5}
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_product_type"


def test_rename_unexpected_error_is_500(client, pickup_point):
    with mock.patch(
        "pvz.services.pickup_point_service.unit_of_work",
        side_effect=RuntimeError("driver exploded"),
    ):
        response = client.patch(f"/api/pvz/{pickup_point.id}", json={"city": "Казань"})

    assert response.status_code == 500
    assert response.get_json()["error"] == "internal_error"


def test_commit_failure_maps_to_500(client, pickup_point, open_reception):
    with mock.patch("pvz.services.reception_service.unit_of_work") as uow:
        uow.return_value.run.side_effect = CommitFailure("Commit failed: disk I/O error")
        response = client.post(f"/api/pvz/{pickup_point.id}/close_last_reception")

    assert response.status_code == 500
    assert response.get_json() == {"error": "commit_failure", "message": "Internal server error"}


def test_rollback_failure_maps_to_500_and_logs_critical(client, pickup_point, caplog):
    failure = RollbackFailure("Rollback failed: connection lost", original_error=RuntimeError("boom"))

    with mock.patch("pvz.services.reception_service.unit_of_work") as uow:
        uow.return_value.run.side_effect = failure
        with caplog.at_level(logging.CRITICAL):
            response = client.post("/api/receptions", json={"pvz_id": str(pickup_point.id)})

    assert response.status_code == 500
    assert response.get_json()["error"] == "rollback_failure"
    assert any(
        r.levelno == logging.CRITICAL and r.exc_info and r.exc_info[1] is failure
        for r in caplog.records
    )
