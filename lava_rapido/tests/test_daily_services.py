from __future__ import annotations

from datetime import date
from decimal import Decimal
from urllib.parse import unquote

import pytest

from lava_rapido.app import models, schemas
from lava_rapido.app.errors import NotFoundError, ServiceAlreadyFinishedError, ValidationError
from lava_rapido.app.services import DailyServiceService
from lava_rapido.app.services.daily_services import whatsapp_url


def _payload(**overrides) -> dict:
    payload = {
        "client_name": "João",
        "client_phone": "(11) 98888-7777",
        "car_make_model": "Onix",
        "car_plate": "abc1d23",
        "car_color": "Prata",
        "vehicle_type": "SEDAN",
        "service_name": "Lavagem Completa",
        "value": "60.00",
    }
    payload.update(overrides)
    return payload


def test_whatsapp_url_keeps_digits_and_encodes_text():
    url = whatsapp_url("+55 (11) 98888-7777", "Olá! Carro pronto")

    assert url.startswith("https://wa.me/5511988887777?text=")
    assert unquote(url.split("text=", 1)[1]) == "Olá! Carro pronto"

    with pytest.raises(ValidationError):
        whatsapp_url("sem telefone", "x")


def test_finish_is_one_way(db_session, business, owner):
    service = DailyServiceService.create_service(
        db_session,
        business.id,
        schemas.DailyServiceCreate(**_payload()),
        today=date(2024, 3, 12),
        member_id=owner.id,
    )
    assert service.car_plate == "ABC1D23"
    assert service.status == models.ServiceStatus.PENDENTE

    finished, url = DailyServiceService.finish_service(
        db_session, business, service.id, member_id=owner.id
    )

    assert finished.status == models.ServiceStatus.FINALIZADO
    assert finished.finished_by_member_id == owner.id
    assert "Lava%20R%C3%A1pido%20Inglaterra" in url
    with pytest.raises(ServiceAlreadyFinishedError):
        DailyServiceService.finish_service(db_session, business, service.id)
    with pytest.raises(NotFoundError):
        DailyServiceService.finish_service(
            db_session, business, "00000000-0000-0000-0000-000000000000"
        )


def test_queue_api_lists_the_day(client, partner):
    created = client.post("/services", json=_payload())
    assert created.status_code == 201
    assert created.json()["created_by_name"] == "Marcos"
    assert created.json()["service_date"] == "2024-03-12"

    listing = client.get("/services")
    assert listing.status_code == 200
    body = listing.json()
    assert body["total"] == 1
    assert body["has_pending"] is True
    assert Decimal(body["items"][0]["value"]) == Decimal("60.00")

    other_day = client.get("/services", params={"day": "2024-03-11"})
    assert other_day.json()["total"] == 0
    assert other_day.json()["has_pending"] is False


def test_queue_api_finish_and_pickup_reminders(client):
    first = client.post("/services", json=_payload()).json()
    client.post("/services", json=_payload(client_name="Ana", client_phone="11 97777-0000"))

    finished = client.post(f"/services/{first['id']}/finish")
    assert finished.status_code == 200
    assert finished.json()["service"]["status"] == "finalizado"
    assert finished.json()["service"]["finished_by_name"] == "Marcos"
    assert finished.json()["whatsapp_url"].startswith("https://wa.me/11988887777?text=")

    again = client.post(f"/services/{first['id']}/finish")
    assert again.status_code == 409

    reminders = client.get("/services/pickup-reminders")
    assert reminders.status_code == 200
    items = reminders.json()["items"]
    assert [item["client_name"] for item in items] == ["João"]
    assert "quase%20fechando" in items[0]["whatsapp_url"]


def test_queue_api_rejects_invalid_cars(client):
    assert client.post("/services", json=_payload(value="0")).status_code == 422
    assert client.post("/services", json=_payload(vehicle_type="ONIBUS")).status_code == 422
    assert client.post("/services", json=_payload(client_name="  ")).status_code == 422
    assert client.post("/services/missing/finish").status_code == 404


def _add_service_without_phone(db_session, business) -> models.DailyService:
    service = models.DailyService(
        business_id=business.id,
        client_name="Carlos",
        client_phone="sem telefone",
        car_make_model="Gol",
        car_plate="XYZ9K88",
        vehicle_type=models.VehicleType.SEDAN,
        service_name="Lavagem Externa",
        value=Decimal("40.00"),
        service_date=date(2024, 3, 12),
    )
    db_session.add(service)
    db_session.commit()
    return service


def test_unusable_phone_leaves_service_pending(db_session, business):
    service = _add_service_without_phone(db_session, business)

    with pytest.raises(ValidationError):
        DailyServiceService.finish_service(db_session, business, service.id)

    stored = DailyServiceService.get_service(db_session, business.id, service.id)
    assert stored.status == models.ServiceStatus.PENDENTE
    assert stored.finished_by_member_id is None


def test_finish_api_with_unusable_phone_can_be_retried_after_fix(client, db_session, business):
    service = _add_service_without_phone(db_session, business)

    failed = client.post(f"/services/{service.id}/finish")
    assert failed.status_code == 400
    assert client.get("/services").json()["has_pending"] is True

    fixed = client.patch(f"/services/{service.id}", json={"client_phone": "11 96666-5555"})
    assert fixed.status_code == 200
    finished = client.post(f"/services/{service.id}/finish")
    assert finished.status_code == 200
    assert finished.json()["whatsapp_url"].startswith("https://wa.me/11966665555?text=")


def test_phone_needs_digits_on_registration(client):
    assert client.post("/services", json=_payload(client_phone="sem telefone")).status_code == 422
    assert client.get("/services").json()["total"] == 0


def test_update_service_corrects_fields(db_session, business):
    service = DailyServiceService.create_service(
        db_session,
        business.id,
        schemas.DailyServiceCreate(**_payload()),
        today=date(2024, 3, 12),
    )

    updated = DailyServiceService.update_service(
        db_session,
        business.id,
        service.id,
        schemas.DailyServiceUpdate(car_plate=" xyz9k88 ", value=Decimal("75.505")),
    )

    assert updated.car_plate == "XYZ9K88"
    assert updated.value == Decimal("75.51")
    assert updated.client_name == "João"
    with pytest.raises(ValidationError):
        DailyServiceService.update_service(
            db_session, business.id, service.id, schemas.DailyServiceUpdate(value=None)
        )
    with pytest.raises(NotFoundError):
        DailyServiceService.update_service(
            db_session,
            business.id,
            "00000000-0000-0000-0000-000000000000",
            schemas.DailyServiceUpdate(client_name="Ana"),
        )


def test_delete_service(db_session, business):
    service = DailyServiceService.create_service(
        db_session,
        business.id,
        schemas.DailyServiceCreate(**_payload()),
        today=date(2024, 3, 12),
    )

    DailyServiceService.delete_service(db_session, business.id, service.id)

    assert DailyServiceService.list_for_day(db_session, business.id, date(2024, 3, 12)) == []
    with pytest.raises(NotFoundError):
        DailyServiceService.delete_service(db_session, business.id, service.id)


def test_edit_and_delete_api_feed_reports(client):
    first = client.post("/services", json=_payload()).json()
    second = client.post("/services", json=_payload(client_name="Ana")).json()
    period = {"start_date": "2024-03-12", "end_date": "2024-03-12"}
    assert Decimal(client.get("/reports/summary", params=period).json()["revenue"]) == Decimal("120.00")

    edited = client.patch(f"/services/{first['id']}", json={"value": "90", "car_color": "Preto"})
    assert edited.status_code == 200
    assert Decimal(edited.json()["value"]) == Decimal("90.00")
    assert edited.json()["car_color"] == "Preto"
    assert edited.json()["created_by_name"] == "Marcos"
    assert Decimal(client.get("/reports/summary", params=period).json()["revenue"]) == Decimal("150.00")

    deleted = client.delete(f"/services/{second['id']}")
    assert deleted.status_code == 204
    summary = client.get("/reports/summary", params=period).json()
    assert Decimal(summary["revenue"]) == Decimal("90.00")
    assert summary["total_services"] == 1

    assert client.patch(f"/services/{first['id']}", json={"value": "0"}).status_code == 422
    assert client.patch("/services/missing", json={"client_name": "Ana"}).status_code == 404
    assert client.delete(f"/services/{second['id']}").status_code == 404
