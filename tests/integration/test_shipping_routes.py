def test_quote_options_fr_home(client, sendcloud, make_option):
    sendcloud.options = [
        make_option("dhl:home", "dhl", "11.00"),
        make_option("colissimo:home", "colissimo", "7.90"),
        make_option("mondial_relay:point", "mondial_relay", "3.90", service_point=True),
    ]
    res = client.post("/quote-options", json={"shipping": {"country": "FR", "postal_code": "75001"}})
    assert res.status_code == 200
    options = res.json()["options"]
    assert [o["option_code"] for o in options] == ["colissimo:home", "dhl:home"]
    assert options[0]["price_cents"] == 790
    assert options[0]["is_pickup_point"] is False


def test_quote_options_pickup_without_matching_carrier(client, sendcloud, make_option):
    sendcloud.options = [make_option("chronopost:relais", "chronopost", "3.00", service_point=True)]
    res = client.post("/quote-options", json={"shipping": {"country": "FR", "postal_code": "75001", "id": "SP1", "carrier_code": "mondial_relay"}})
    assert res.status_code == 200
    assert res.json() == {"options": []}


def test_quote_options_missing_shipping(client):
    res = client.post("/quote-options", json={})
    assert res.status_code == 400
    assert res.json()["detail"] == "Missing parameter: shipping"


def test_quote_options_invalid_json(client):
    res = client.post("/quote-options", content=b"{oops", headers={"Content-Type": "application/json"})
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid JSON"


def test_quote_options_upstream_failure(client, sendcloud):
    sendcloud.options_status = 503
    res = client.post("/quote-options", json={"shipping": {"country": "FR", "postal_code": "75001"}})
    assert res.status_code == 500


def test_quote_price(client, sendcloud, make_option):
    sendcloud.options = [make_option("colissimo:home", "colissimo", "12.345")]
    res = client.post("/quote-price", json={"shipping": {"country": "FR", "postal_code": "75001"}})
    assert res.status_code == 200
    assert res.json() == {"amount": 1235}


def test_quote_price_no_option(client):
    res = client.post("/quote-price", json={"shipping": {"country": "FR", "postal_code": "75001"}})
    assert res.status_code == 500
    assert res.json()["detail"] == "Aucune option de livraison disponible"


def test_options_preflight_returns_204(client):
    res = client.options("/quote-price", headers={"Origin": "http://localhost:8000", "Access-Control-Request-Method": "POST"})
    assert res.status_code == 204
    assert "POST" in res.headers["access-control-allow-methods"]
    assert res.headers["access-control-allow-headers"] == "Content-Type"


def test_get_on_post_route_is_405(client):
    assert client.get("/quote-options").status_code == 405


def test_asgi_app_exposes_routes():
    from fastapi.testclient import TestClient

    from livre_backend.asgi import app

    assert {"/quote-options", "/quote-price", "/create-checkout", "/health", "/health/fulfillment"} <= set(app.openapi()["paths"])
    # /webhook est hors schéma: la route existe si un GET répond 405 et non 404
    raw_client = TestClient(app)
    for path in ("/quote-options", "/quote-price", "/create-checkout", "/webhook"):
        assert raw_client.get(path).status_code == 405


def test_handlers_run_in_threadpool():
    import inspect

    from livre_backend.payments import views as payment_views
    from livre_backend.shipping import views as shipping_views

    # appels httpx/SMTP bloquants: les handlers restent synchrones
    for handler in (shipping_views.quote_options, shipping_views.quote_price, payment_views.create_checkout, payment_views.webhook_stripe):
        assert not inspect.iscoroutinefunction(handler)
