import pytest

from livre_backend.shipping.builder import SenderConfig, ShipmentRequestBuilder
from livre_backend.shipping.errors import IncompleteAddressError, MissingRateCodeError
from livre_backend.shipping.models import Buyer, Destination, OrderRecord
from livre_backend.shipping.sendcloud_client import ANNOUNCE_PATH, SHIPMENTS_PATH

SENDER = SenderConfig(
    name="Éditions Test",
    email="expedition@example.com",
    address_line_1="1 rue du Livre",
    address_line_2="",
    postal_code="69001",
    city="Lyon",
    country_code="FR",
    brand_id=7,
)


def _order(shipping, rate_code="colissimo:home", order_id="cs_test_" + "x" * 60):
    return OrderRecord(
        order_id=order_id,
        buyer=Buyer(full_name="Marie Curie", email="marie@example.com", phone="+33600000000"),
        destination=Destination.from_payload(shipping),
        rate_code=rate_code,
    )


@pytest.fixture
def builder():
    return ShipmentRequestBuilder(sender=SENDER, catalog_price_cents=3000)


def test_fr_home_no_customs(builder):
    req = builder.build(_order({"country": "FR", "postal_code": "75001", "city": "Paris", "street": "Rue A", "house_number": "3"}))
    p = req.payload
    assert req.endpoint == SHIPMENTS_PATH
    assert req.international is False
    assert "customs_information" not in p
    assert "parcel_items" not in p["parcels"][0]
    assert "to_service_point" not in p
    assert p["ship_with"] == {"type": "shipping_option_code", "properties": {"shipping_option_code": "colissimo:home"}}
    assert p["external_reference"] == _order({}).order_id
    assert p["brand_id"] == 7
    assert p["telephone"] == "+33600000000"
    assert p["from_address"]["city"] == "Lyon"
    assert p["parcels"][0]["weight"] == {"value": 0.5, "unit": "kg"}
    assert p["parcels"][0]["dimensions"] == {"length": "30", "width": "20", "height": "5", "unit": "cm"}


def test_de_home_adds_customs(builder):
    order = _order({"country": "DE", "postal_code": "10115", "city": "Berlin", "street": "Unter den Linden", "house_number": "1"}, rate_code="dhl:home")
    req = builder.build(order)
    p = req.payload
    assert req.endpoint == ANNOUNCE_PATH
    assert req.international is True
    items = p["parcels"][0]["parcel_items"]
    assert len(items) == 1
    assert items[0]["hs_code"] == "490199"
    assert items[0]["description"] == "book"
    assert items[0]["price"] == {"value": 30.0, "currency": "EUR"}
    assert items[0]["origin_country"] == "FR"
    assert p["customs_information"]["export_reason"] == "commercial_goods"
    assert p["customs_information"]["export_type"] == "private"
    assert p["customs_information"]["invoice_number"] == order.order_id[:40]
    assert len(p["customs_information"]["invoice_number"]) == 40


def test_pickup_never_has_customs(builder):
    req = builder.build(_order({"country": "BE", "postal_code": "1000", "id": "SP9", "carrier_code": "bpost"}, rate_code="bpost:sp"))
    p = req.payload
    assert req.endpoint == SHIPMENTS_PATH
    assert p["to_service_point"] == {"id": "SP9"}
    assert "customs_information" not in p
    assert "parcel_items" not in p["parcels"][0]
    assert p["to_address"]["first_name"] == "Marie"
    assert p["to_address"]["last_name"] == "Curie"


def test_missing_rate_code(builder):
    with pytest.raises(MissingRateCodeError):
        builder.build(_order({"country": "FR", "postal_code": "75001", "city": "Paris"}, rate_code="  "))


def test_incomplete_home_address(builder):
    with pytest.raises(IncompleteAddressError):
        builder.build(_order({"country": "FR", "postal_code": "75001"}))
