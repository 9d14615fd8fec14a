from __future__ import annotations

from decimal import Decimal

import pytest

from lava_rapido.app import models
from lava_rapido.app.errors import NotFoundError, ValidationError
from lava_rapido.app.services import ServicePriceService
from lava_rapido.app.services.service_prices import SERVICE_NAMES


def test_new_business_gets_a_zero_price_grid(db_session, business):
    prices = ServicePriceService.list_prices(db_session, business.id)

    assert len(prices) == len(SERVICE_NAMES) * len(models.VehicleType) == 48
    assert all(row.price == Decimal("0") for row in prices)
    assert ServicePriceService.initialize_defaults(db_session, business.id) == 0


def test_update_prices_for_one_vehicle(db_session, business):
    ServicePriceService.update_prices(
        db_session,
        business.id,
        models.VehicleType.SUV,
        {"Lavagem Completa": Decimal("80"), "Lavagem Motor": Decimal("35.5")},
    )

    assert ServicePriceService.quote(
        db_session, business.id, "Lavagem Completa", models.VehicleType.SUV
    ) == Decimal("80.00")
    assert ServicePriceService.quote(
        db_session, business.id, "Lavagem Completa", models.VehicleType.SEDAN
    ) == Decimal("0")


def test_update_prices_rejects_unknown_services_without_changes(db_session, business):
    with pytest.raises(ValidationError):
        ServicePriceService.update_prices(
            db_session,
            business.id,
            models.VehicleType.MOTO,
            {"Lavagem Completa": Decimal("20"), "Polimento": Decimal("90")},
        )

    assert ServicePriceService.quote(
        db_session, business.id, "Lavagem Completa", models.VehicleType.MOTO
    ) == Decimal("0")


def test_quote_missing_price(db_session, business):
    with pytest.raises(NotFoundError):
        ServicePriceService.quote(db_session, business.id, "Polimento", models.VehicleType.MOTO)


def test_price_grid_api(client, partner, auth_headers):
    saved = client.put("/service-prices/SEDAN", json={"prices": {"Lavagem Externa": "40"}})
    assert saved.status_code == 200
    assert saved.json()["total"] == len(SERVICE_NAMES)

    quote = client.get(
        "/service-prices/quote",
        params={"service_name": "Lavagem Externa", "vehicle_type": "SEDAN"},
    )
    assert quote.status_code == 200
    assert Decimal(quote.json()["price"]) == Decimal("40.00")

    assert client.get("/service-prices", params={"vehicle_type": "SEDAN"}).json()["total"] == 8
    assert client.put("/service-prices/SEDAN", json={"prices": {"Polimento": "1"}}).status_code == 400
    assert client.put("/service-prices/SEDAN", json={"prices": {"Lavagem Externa": "-1"}}).status_code == 422

    as_partner = client.put(
        "/service-prices/SEDAN",
        json={"prices": {"Lavagem Externa": "10"}},
        headers=auth_headers("user-partner"),
    )
    assert as_partner.status_code == 403
