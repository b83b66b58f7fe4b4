from datetime import timedelta

from conftest import D, auth_headers
from staybook.security import issue_token


def days(n):
    return (D + timedelta(days=n)).isoformat()


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_sign_up_and_profile(client):
    headers = {"Authorization": f"Bearer {issue_token('idp-123')}"}
    assert client.get("/api/v1/users/me", headers=headers).status_code == 401
    r = client.post("/api/v1/users/me", headers=headers, json={
        "email": "New@Example.com", "first_name": "New", "last_name": "Person", "user_type": "host",
    })
    assert r.status_code == 201
    assert r.json()["email"] == "new@example.com"
    assert r.json()["user_type"] == "host"
    assert client.post("/api/v1/users/me", headers=headers, json={
        "email": "other@example.com", "first_name": "A", "last_name": "B",
    }).status_code == 409
    r = client.patch("/api/v1/users/me", headers=headers, json={"phone": "+351 555"})
    assert r.json()["phone"] == "+351 555"


def test_requests_without_token_are_rejected(client):
    assert client.get("/api/v1/bookings").status_code == 401
    assert client.get("/api/v1/bookings", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_host_manages_hotel(client, host, guest):
    body = {
        "name": "Alfama Loft", "address": "Rua 1", "city": "Lisbon", "country": "Portugal",
        "max_guests": 3, "price_per_night": "120.50", "amenities": ["wifi", "WiFi", "pool"],
        "images": ["a.jpg", "b.jpg"],
    }
    assert client.post("/api/v1/hotels", headers=auth_headers(guest), json=body).status_code == 403
    r = client.post("/api/v1/hotels", headers=auth_headers(host), json=body)
    assert r.status_code == 201
    hotel = r.json()
    assert hotel["amenities"] == ["pool", "wifi"]
    assert hotel["primary_image_url"] == "a.jpg"
    assert hotel["price_per_night"] == "120.50"

    r = client.patch(f"/api/v1/hotels/{hotel['hotel_id']}", headers=auth_headers(host), json={"price_per_night": "0"})
    assert r.status_code == 400
    r = client.post(f"/api/v1/hotels/{hotel['hotel_id']}/active", headers=auth_headers(host), json={"is_active": False})
    assert r.json()["is_active"] is False
    assert client.get(f"/api/v1/hotels/{hotel['hotel_id']}").status_code == 404
    assert client.get(f"/api/v1/hotels/{hotel['hotel_id']}", headers=auth_headers(host)).status_code == 200
    assert [h["hotel_id"] for h in client.get("/api/v1/host/hotels", headers=auth_headers(host)).json()] == [hotel["hotel_id"]]


def test_search_and_quote(client, hotel):
    r = client.get("/api/v1/hotels/search", params={"city": "lisbon", "check_in": days(0), "check_out": days(3)})
    assert r.status_code == 200
    (row,) = r.json()
    assert row["total_price"] == "447.00"
    assert row["average_rating"] is None
    r = client.get(f"/api/v1/hotels/{hotel.id}/price", params={"check_in": days(0), "check_out": days(3)})
    assert r.json()["nights"] == 3
    assert r.json()["total_price"] == "447.00"
    r = client.get("/api/v1/hotels/search", params={"city": "lisbon", "check_in": days(3), "check_out": days(1)})
    assert r.status_code == 400


def test_booking_flow_over_http(client, host, guest, make_hotel):
    hotel = make_hotel(host, price="89.00")
    r = client.post("/api/v1/bookings", headers=auth_headers(guest), json={
        "hotel_id": hotel.id, "check_in_date": days(0), "check_out_date": days(3), "num_guests": 2,
    })
    assert r.status_code == 201
    booking = r.json()
    assert booking["status"] == "pending"
    assert booking["total_price"] == "267.00"

    r = client.post("/api/v1/bookings", headers=auth_headers(host), json={
        "hotel_id": hotel.id, "check_in_date": days(1), "check_out_date": days(4),
    })
    assert r.status_code == 409
    assert r.json()["detail"] == "Hotel already booked for these dates"

    r = client.get(f"/api/v1/hotels/{hotel.id}/availability", params={"check_in": days(3), "check_out": days(5)})
    assert r.json()["available"] is True

    r = client.post(f"/api/v1/bookings/{booking['id']}/pay", headers=auth_headers(guest), json={"payment_method": "card"})
    assert r.status_code == 200
    assert r.json()["payment_status"] == "completed"
    assert r.json()["booking"]["status"] == "confirmed"

    assert client.post(f"/api/v1/bookings/{booking['id']}/complete", headers=auth_headers(guest)).status_code == 403
    r = client.post(f"/api/v1/bookings/{booking['id']}/complete", headers=auth_headers(host))
    assert r.json()["status"] == "completed"
    r = client.post(f"/api/v1/bookings/{booking['id']}/complete", headers=auth_headers(host))
    assert r.status_code == 409

    r = client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers(guest))
    assert r.json()["payment_method"] == "card"
    assert r.json()["hotel_name"] == hotel.name

    r = client.post("/api/v1/reviews", headers=auth_headers(guest), json={"booking_id": booking["id"], "rating": 5})
    assert r.status_code == 201
    assert client.get(f"/api/v1/hotels/{hotel.id}/reviews").json()[0]["rating"] == 5

    overview = client.get("/api/v1/host/overview", headers=auth_headers(host)).json()
    assert overview["total_revenue"] == "267.00"
    assert overview["average_rating"] == 5.0


def test_host_confirms_booking_over_http(client, host, guest, hotel):
    r = client.post("/api/v1/bookings", headers=auth_headers(guest), json={
        "hotel_id": hotel.id, "check_in_date": days(0), "check_out_date": days(2),
    })
    booking_id = r.json()["id"]
    assert client.post(f"/api/v1/bookings/{booking_id}/confirm", headers=auth_headers(guest)).status_code == 403
    r = client.post(f"/api/v1/bookings/{booking_id}/confirm", headers=auth_headers(host))
    assert r.status_code == 200
    assert r.json()["status"] == "confirmed"
    assert client.post(f"/api/v1/bookings/{booking_id}/confirm", headers=auth_headers(host)).status_code == 409


def test_host_booking_and_exports(client, host, guest, hotel):
    assert client.post("/api/v1/host/bookings", headers=auth_headers(guest), json={
        "hotel_id": hotel.id, "guest_id": guest.id, "check_in_date": days(0), "check_out_date": days(1),
    }).status_code == 403
    r = client.post("/api/v1/host/bookings", headers=auth_headers(host), json={
        "hotel_id": hotel.id, "guest_id": guest.id, "check_in_date": days(0), "check_out_date": days(1),
    })
    assert r.status_code == 201
    assert r.json()["status"] == "confirmed"

    rows = client.get("/api/v1/host/financials", headers=auth_headers(host)).json()
    assert rows[0]["amount"] == "149.00"
    r = client.get("/api/v1/host/financials/export", headers=auth_headers(host))
    assert r.headers["content-type"].startswith("text/csv")
    r = client.get("/api/v1/host/financials/export", params={"format": "pdf"}, headers=auth_headers(host))
    assert r.content.startswith(b"%PDF")
    assert client.get("/api/v1/host/financials/export", params={"format": "xls"}, headers=auth_headers(host)).status_code == 400
    assert len(client.get("/api/v1/host/bookings", headers=auth_headers(host)).json()) == 1


def test_wishlist_and_notifications(client, host, guest, hotel):
    assert client.post("/api/v1/wishlist", headers=auth_headers(guest), json={"hotel_id": hotel.id}).status_code == 201
    assert client.post("/api/v1/wishlist", headers=auth_headers(guest), json={"hotel_id": hotel.id}).status_code == 409
    assert client.delete(f"/api/v1/wishlist/{hotel.id}", headers=auth_headers(guest)).status_code == 204
    assert client.get("/api/v1/wishlist", headers=auth_headers(guest)).json() == []

    client.post("/api/v1/bookings", headers=auth_headers(guest), json={
        "hotel_id": hotel.id, "check_in_date": days(0), "check_out_date": days(1),
    })
    (note,) = client.get("/api/v1/notifications", headers=auth_headers(host)).json()
    assert note["type"] == "booking_created"
    assert client.post(f"/api/v1/notifications/{note['id']}/read", headers=auth_headers(guest)).status_code == 403
    assert client.post(f"/api/v1/notifications/{note['id']}/read", headers=auth_headers(host)).json()["is_read"] is True
    assert client.post("/api/v1/notifications/read-all", headers=auth_headers(host)).json() == {"updated": 0}


def test_nearby_places_over_http(client, host, hotel):
    r = client.post("/api/v1/places", headers=auth_headers(host), json={"name": "Castle", "city": "Lisbon", "country": "Portugal"})
    assert r.status_code == 201
    place_id = r.json()["id"]
    r = client.post(f"/api/v1/hotels/{hotel.id}/nearby-places", headers=auth_headers(host), json={"place_id": place_id, "distance_m": 800})
    assert r.status_code == 201
    assert r.json()[0]["distance_m"] == 800
    assert client.post(f"/api/v1/hotels/{hotel.id}/nearby-places", headers=auth_headers(host), json={"place_id": place_id}).status_code == 409
    r = client.patch(f"/api/v1/hotels/{hotel.id}/nearby-places/{place_id}", headers=auth_headers(host), json={"distance_m": -1})
    assert r.status_code == 400
    assert client.delete(f"/api/v1/hotels/{hotel.id}/nearby-places/{place_id}", headers=auth_headers(host)).status_code == 204
    assert client.get(f"/api/v1/hotels/{hotel.id}/nearby-places").json() == []
    assert [p["name"] for p in client.get("/api/v1/places", params={"city": "LISBON"}).json()] == ["Castle"]


def test_session_cookie_round_trip(client, guest):
    r = client.post("/api/v1/auth/session", headers=auth_headers(guest))
    assert r.status_code == 200
    assert "staybook_session" in r.headers["set-cookie"]
    assert client.get("/api/v1/users/me").json()["id"] == guest.id
    client.post("/api/v1/auth/logout")
    assert client.get("/api/v1/users/me").status_code == 401
