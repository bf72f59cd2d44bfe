import uuid

from pvz.models import PickupPoint, Product, Reception
from pvz.services import inventory_service


def test_pvz_create_and_list(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["pvz", "create", "--city", "Казань"])
    assert result.exit_code == 0
    assert "PASS Created pickup point" in result.output
    assert db_session.query(PickupPoint).filter_by(city="Казань").count() == 1

    listed = runner.invoke(args=["pvz", "list"])
    assert listed.exit_code == 0
    assert "Total: 1 pickup points" in listed.output


def test_pvz_create_rejects_city(app, db_session):
    result = app.test_cli_runner().invoke(args=["pvz", "create", "--city", "Новосибирск"])

    assert result.exit_code != 0
    assert "invalid_city" in result.output


def test_reception_open_close(app, pickup_point):
    runner = app.test_cli_runner()

    opened = runner.invoke(args=["receptions", "open", str(pickup_point.id)])
    assert opened.exit_code == 0
    assert "PASS Opened reception" in opened.output

    closed = runner.invoke(args=["receptions", "close", str(pickup_point.id)])
    assert closed.exit_code == 0
    assert Reception.query.filter_by(pickup_point_id=pickup_point.id).one().status == "close"

    again = runner.invoke(args=["receptions", "close", str(pickup_point.id)])
    assert again.exit_code != 0
    assert "no_open_reception" in again.output


def test_products_add_and_remove_last(app, open_reception):
    runner = app.test_cli_runner()

    added = runner.invoke(args=["products", "add", str(open_reception.id), "food", "clothing"])
    assert added.exit_code == 0
    assert added.output.count("PASS Added") == 2

    removed = runner.invoke(args=["products", "remove-last", str(open_reception.id)])
    assert removed.exit_code == 0
    assert "clothing" in removed.output

    remaining = inventory_service.get_products_by_reception(open_reception.id)
    assert [p.type for p in remaining] == ["food"]


def test_products_add_unknown_reception(app, db_session):
    result = app.test_cli_runner().invoke(args=["products", "add", str(uuid.uuid4()), "food"])

    assert result.exit_code != 0
    assert "reception_not_found" in result.output
    assert db_session.query(Product).count() == 0


def test_pvz_list_shows_open_reception(app, pickup_point, other_pickup_point, open_reception):
    result = app.test_cli_runner().invoke(args=["pvz", "list"])

    assert result.exit_code == 0
    assert str(open_reception.id) in result.output
    assert "Total: 2 pickup points" in result.output
