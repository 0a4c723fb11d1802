# backend/tests/routes/test_offering_routes.py
import pytest


@pytest.fixture
def base_service_id(seed) -> str:
    return seed.base_service(base_price=100, base_duration=60)


def _create(client, base_service_id, professional_id="pro-1", price=100, duration=60):
    return client.post(
        f"/api/v1/professionals/{professional_id}/offerings",
        json={"base_service_id": base_service_id, "price": price, "duration": duration},
    )


def test_create_and_get(client, base_service_id):
    response = _create(client, base_service_id, price=120, duration=75)
    assert response.status_code == 201

    offering = client.get(f"/api/v1/offerings/{response.json()['id']}").json()
    assert offering["name"] == "Balayage"
    assert offering["price"] == 120
    assert offering["bookings"] == 0


def test_price_below_base_is_400_with_minimum(client, base_service_id):
    response = _create(client, base_service_id, price=80)

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "PRICE_BELOW_BASE"
    assert detail["message"] == "Price cannot be lower than the base price of $100"
    assert detail["details"]["min_price"] == 100


def test_duplicate_is_409(client, base_service_id):
    assert _create(client, base_service_id).status_code == 201
    response = _create(client, base_service_id, price=150)
    assert response.status_code == 409


def test_unknown_base_service_is_404(client):
    response = _create(client, "01HZZZZZZZZZZZZZZZZZZZZZZZ")
    assert response.status_code == 404


def test_update_and_delete(client, base_service_id):
    offering_id = _create(client, base_service_id).json()["id"]

    updated = client.patch(f"/api/v1/offerings/{offering_id}", json={"duration": 120})
    too_long = client.patch(f"/api/v1/offerings/{offering_id}", json={"duration": 121})

    assert updated.status_code == 200
    assert updated.json()["duration"] == 120
    assert too_long.status_code == 400
    assert too_long.json()["detail"]["code"] == "DURATION_TOO_LONG"

    assert client.delete(f"/api/v1/offerings/{offering_id}").status_code == 204
    assert client.get(f"/api/v1/offerings/{offering_id}").status_code == 404


def test_metrics_update(client, base_service_id):
    offering_id = _create(client, base_service_id).json()["id"]

    response = client.patch(
        f"/api/v1/offerings/{offering_id}/metrics",
        json={"bookings": 4, "average_rating": 4.5},
    )
    bad = client.patch(f"/api/v1/offerings/{offering_id}/metrics", json={"reviews": -1})

    assert response.status_code == 200
    assert response.json()["bookings"] == 4
    assert bad.status_code == 400


def test_list_sorted(client, seed, base_service_id):
    category_id = seed.category("Nails")
    gel = seed.base_service(category_id, name="Gel", base_price=30, base_duration=45)
    _create(client, base_service_id, price=150)
    _create(client, gel, price=35, duration=45)

    response = client.get(
        "/api/v1/professionals/pro-1/offerings",
        params={"sort_field": "price", "direction": "desc"},
    )
    bad = client.get("/api/v1/professionals/pro-1/offerings", params={"sort_field": "color"})

    assert [o["price"] for o in response.json()] == [150, 35]
    assert bad.status_code == 400
    assert bad.json()["detail"]["code"] == "INVALID_SORT_FIELD"


def test_validate_endpoint(client, base_service_id):
    ok = client.post(
        "/api/v1/offerings/validate",
        json={"base_service_id": base_service_id, "price": 100, "duration": 30},
    ).json()
    short = client.post(
        "/api/v1/offerings/validate",
        json={"base_service_id": base_service_id, "price": 100, "duration": 20},
    ).json()

    assert ok["valid"] is True
    assert ok["bounds"] == {"min_price": 100, "min_duration": 30, "max_duration": 120}
    assert short["valid"] is False
    assert short["error"]["code"] == "DURATION_TOO_SHORT"
    assert short["error"]["field"] == "duration"


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_price_is_422(client, base_service_id, literal):
    # Python's json module accepts these literals; the request model must not
    headers = {"content-type": "application/json"}
    created = client.post(
        "/api/v1/professionals/pro-1/offerings",
        content=f'{{"base_service_id": "{base_service_id}", "price": {literal}, "duration": 60}}',
        headers=headers,
    )
    offering_id = _create(client, base_service_id).json()["id"]
    updated = client.patch(
        f"/api/v1/offerings/{offering_id}", content=f'{{"price": {literal}}}', headers=headers
    )

    assert created.status_code == 422
    assert updated.status_code == 422
    assert client.get(f"/api/v1/offerings/{offering_id}").json()["price"] == 100
