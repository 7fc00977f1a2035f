import pytest

from eventhire.services import booking

pytestmark = pytest.mark.api

ORDER_BODY = {
    "event_title": "Corporate end-of-year dinner",
    "event_date": "2026-12-12",
    "start_time": "18:00",
    "end_time": "23:00",
    "guest_count": 80,
    "quoted_price": 320000,
}

JOB_BODY = {
    "position": "Waiter",
    "work_date": "2026-12-12",
    "start_time": "17:00",
    "end_time": "23:00",
    "hourly_rate": 1500,
}


# --------------------------
# Auth
# --------------------------

def test_register_login_me(client, notifier):
    resp = client.post("/api/auth/register", json={
        "first_name": "Chidi",
        "last_name": "Okafor",
        "email": "Chidi@Example.com",
        "password": "secret123",
        "role": "waiter",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["user"]["email"] == "chidi@example.com"
    assert body["user"]["is_approved"] is False
    assert notifier.kinds() == ["welcome"]

    resp = client.post("/api/auth/login", json={"email": "chidi@example.com", "password": "secret123"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["role"] == "waiter"
    assert resp.json()["last_login"] is not None


def test_register_duplicate_and_admin_role(client, customer):
    resp = client.post("/api/auth/register", json={
        "first_name": "A", "last_name": "B", "email": customer.email, "password": "secret123",
    })
    assert resp.status_code == 400

    resp = client.post("/api/auth/register", json={
        "first_name": "A", "last_name": "B", "email": "root@example.com", "password": "secret123", "role": "admin",
    })
    assert resp.status_code == 422


def test_login_rejects_bad_password_and_inactive(client, db, customer):
    assert client.post("/api/auth/login", json={"email": customer.email, "password": "nope"}).status_code == 401

    customer.is_active = False
    db.commit()
    assert client.post("/api/auth/login", json={"email": customer.email, "password": "secret123"}).status_code == 401


def test_missing_token_is_401(client):
    assert client.get("/api/auth/me").status_code == 401


def test_password_reset_flow(client, customer, notifier):
    resp = client.post("/api/auth/forgot-password", json={"email": customer.email})
    assert resp.status_code == 200
    kind, recipient, payload = notifier.sent[-1]
    assert (kind, recipient) == ("password-reset", customer.email)
    token = payload["reset_url"].rsplit("/", 1)[-1]

    resp = client.post("/api/auth/reset-password", json={"token": token, "password": "newsecret1"})
    assert resp.status_code == 200
    assert client.post("/api/auth/login", json={"email": customer.email, "password": "newsecret1"}).status_code == 200

    # token is bound to the old password hash
    resp = client.post("/api/auth/reset-password", json={"token": token, "password": "another1"})
    assert resp.status_code == 400


def test_forgot_password_does_not_reveal_unknown_email(client, notifier):
    resp = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert resp.status_code == 200
    assert notifier.sent == []


def test_update_own_details(client, customer, auth_headers):
    resp = client.put("/api/auth/profile", headers=auth_headers(customer), json={"first_name": "Ngozi", "phone": "08030000000"})
    assert resp.status_code == 200
    body = resp.json()
    assert (body["first_name"], body["phone"]) == ("Ngozi", "08030000000")
    assert body["last_name"] == customer.last_name

    resp = client.put("/api/auth/profile", headers=auth_headers(customer), json={"last_name": ""})
    assert resp.status_code == 422


def test_change_password_checks_current(client, customer, auth_headers):
    resp = client.put(
        "/api/auth/password", headers=auth_headers(customer),
        json={"current_password": "wrong-one", "new_password": "newsecret1"},
    )
    assert resp.status_code == 401
    assert resp.json()["code"] == "invalid_credentials"

    resp = client.put(
        "/api/auth/password", headers=auth_headers(customer),
        json={"current_password": "secret123", "new_password": "newsecret1"},
    )
    assert resp.status_code == 200
    assert resp.json()["access_token"]
    assert client.post("/api/auth/login", json={"email": customer.email, "password": "secret123"}).status_code == 401
    assert client.post("/api/auth/login", json={"email": customer.email, "password": "newsecret1"}).status_code == 200


# --------------------------
# Profiles and catalog
# --------------------------

def test_vendor_updates_own_profile(client, vendor_user, category, auth_headers):
    resp = client.put("/api/vendors/me", headers=auth_headers(vendor_user), json={
        "business_name": "Lagos Small Chops",
        "category_ids": [category.id],
        "min_price": 100000,
        "max_price": 500000,
        "average_rating": 5,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["business_name"] == "Lagos Small Chops"
    assert [c["name"] for c in body["categories"]] == ["Catering"]
    assert body["average_rating"] == 0


def test_vendor_listing_shows_verified_only(client, vendor_user, make_user, category, db):
    make_user("vendor", approved=False)
    vendor_user.vendor_profile.categories = [category]
    db.commit()

    resp = client.get("/api/vendors", params={"category_id": category.id})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["items"][0]["id"] == vendor_user.vendor_profile.id


def test_waiter_profile_and_listing(client, waiter_user, expertise, auth_headers):
    resp = client.put("/api/waiters/me", headers=auth_headers(waiter_user), json={"expertise_ids": [expertise.id]})
    assert resp.status_code == 200

    resp = client.get("/api/waiters", params={"expertise_id": expertise.id})
    assert resp.json()["total"] == 1
    resp = client.get(f"/api/waiters/{waiter_user.waiter_profile.id}")
    assert resp.status_code == 200
    assert resp.json()["attitude_rating"] == 0


def test_reference_catalog_admin_writes(client, admin, customer, auth_headers):
    resp = client.post("/api/reference/categories", headers=auth_headers(customer), json={"name": "Decor"})
    assert resp.status_code == 403

    resp = client.post("/api/reference/categories", headers=auth_headers(admin), json={"name": "Decor"})
    assert resp.status_code == 201
    entry_id = resp.json()["id"]

    resp = client.post("/api/reference/event-types", headers=auth_headers(admin), json={
        "name": "Birthday", "suggested_category_ids": [entry_id],
    })
    assert resp.status_code == 201

    assert [e["name"] for e in client.get("/api/reference/categories").json()] == ["Decor"]
    client.delete(f"/api/reference/categories/{entry_id}", headers=auth_headers(admin))
    assert client.get("/api/reference/categories").json() == []


# --------------------------
# Hiring and transitions
# --------------------------

def test_hire_vendor_and_walk_order(client, customer, vendor_user, event_type, notifier, auth_headers):
    vendor_id = vendor_user.vendor_profile.id
    resp = client.post(
        f"/api/vendors/{vendor_id}/hire",
        headers=auth_headers(customer),
        json={**ORDER_BODY, "event_type_id": event_type.id},
    )
    assert resp.status_code == 201
    order = resp.json()
    assert order["status"] == "pending"
    assert sorted(notifier.kinds()) == ["booking-confirmed", "booking-received"]

    for status in ("confirmed", "in-progress", "completed"):
        resp = client.put(
            f"/api/orders/{order['id']}/status", headers=auth_headers(vendor_user), json={"status": status}
        )
        assert resp.status_code == 200, resp.text

    resp = client.put(
        f"/api/orders/{order['id']}/status", headers=auth_headers(vendor_user), json={"status": "cancelled"}
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_transition"

    stats = client.get("/api/vendors/orders/stats", headers=auth_headers(vendor_user)).json()
    assert stats["total_transactions"] == 1
    assert stats["completed_transactions"] == 1
    assert stats["orders_by_status"]["completed"]["count"] == 1


def test_order_hidden_from_outsiders(client, db, customer, vendor_user, make_user, order_details, auth_headers):
    order = booking.create_order(db, customer, vendor_user.vendor_profile.id, order_details())
    stranger = make_user("user")

    assert client.get(f"/api/orders/{order.id}", headers=auth_headers(stranger)).status_code == 404
    resp = client.put(f"/api/orders/{order.id}/status", headers=auth_headers(stranger), json={"status": "cancelled"})
    assert resp.status_code == 404
    assert client.get(f"/api/orders/{order.id}", headers=auth_headers(customer)).status_code == 200

    listing = client.get("/api/orders/me", headers=auth_headers(customer)).json()
    assert listing["total"] == 1


def test_vendor_cannot_book_vendor(client, vendor_user, make_user, event_type, auth_headers):
    other = make_user("vendor")
    resp = client.post(
        f"/api/vendors/{other.vendor_profile.id}/hire",
        headers=auth_headers(vendor_user),
        json={**ORDER_BODY, "event_type_id": event_type.id},
    )
    assert resp.status_code == 403


def test_hire_waiter_requires_approved_vendor(client, make_user, waiter_user, auth_headers, notifier):
    pending_vendor = make_user("vendor", approved=False)
    resp = client.post(
        f"/api/waiters/{waiter_user.waiter_profile.id}/hire", headers=auth_headers(pending_vendor), json=JOB_BODY
    )
    assert resp.status_code == 403
    assert notifier.sent == []


def test_hire_waiter_and_decline(client, vendor_user, waiter_user, auth_headers, notifier):
    resp = client.post(
        f"/api/waiters/{waiter_user.waiter_profile.id}/hire", headers=auth_headers(vendor_user), json=JOB_BODY
    )
    assert resp.status_code == 201
    job = resp.json()
    assert job["total_hours"] == 6
    assert job["total_amount"] == 9000
    assert notifier.kinds() == ["job-offer"]

    resp = client.put(
        f"/api/jobs/{job['id']}/status",
        headers=auth_headers(waiter_user),
        json={"status": "declined", "decline_reason": "Travelling"},
    )
    assert resp.status_code == 200
    assert resp.json()["decline_reason"] == "Travelling"
    assert resp.json()["responded_at"] is not None

    jobs = client.get("/api/waiters/jobs", headers=auth_headers(waiter_user)).json()
    assert jobs["items"][0]["status"] == "declined"
    issued = client.get("/api/vendors/jobs", headers=auth_headers(vendor_user)).json()
    assert issued["total"] == 1


def test_invalid_time_is_422(client, vendor_user, waiter_user, auth_headers):
    resp = client.post(
        f"/api/waiters/{waiter_user.waiter_profile.id}/hire",
        headers=auth_headers(vendor_user),
        json={**JOB_BODY, "start_time": "7pm"},
    )
    assert resp.status_code == 422


# --------------------------
# Ratings
# --------------------------

def test_rate_vendor_and_read_back(client, customer, vendor_user, completed_order, auth_headers):
    vendor_id = vendor_user.vendor_profile.id
    resp = client.post(
        f"/api/vendors/{vendor_id}/rate",
        headers=auth_headers(customer),
        json={"rating": 4, "review": "Great food", "breakdown": {"quality": 5, "value": 3}},
    )
    assert resp.status_code == 201
    rating = resp.json()
    assert rating["order_id"] == completed_order.id
    assert rating["overall_breakdown_rating"] == 4

    resp = client.post(f"/api/vendors/{vendor_id}/rate", headers=auth_headers(customer), json={"rating": 5})
    assert resp.status_code == 400
    assert resp.json()["code"] == "not_eligible"

    resp = client.post(
        f"/api/vendors/{vendor_id}/rate",
        headers=auth_headers(customer),
        json={"rating": 5, "transaction_id": completed_order.id},
    )
    assert resp.status_code == 409

    page = client.get(f"/api/ratings/vendor/{vendor_id}").json()
    assert page["total"] == 1
    assert page["average_rating"] == 4
    assert page["rating_breakdown"]["4"] == 1
    assert page["attitude_breakdown"] is None

    resp = client.post(
        f"/api/ratings/{rating['id']}/respond", headers=auth_headers(vendor_user), json={"message": "Thanks!"}
    )
    assert resp.status_code == 200
    resp = client.post(
        f"/api/ratings/{rating['id']}/respond", headers=auth_headers(vendor_user), json={"message": "Again"}
    )
    assert resp.json()["code"] == "already_responded"


def test_rate_waiter_with_attitude(client, vendor_user, waiter_user, completed_job, auth_headers):
    waiter_id = waiter_user.waiter_profile.id
    resp = client.post(
        f"/api/waiters/{waiter_id}/rate",
        headers=auth_headers(vendor_user),
        json={"rating": 5, "attitude_rating": 4},
    )
    assert resp.status_code == 201

    page = client.get(f"/api/ratings/waiter/{waiter_id}").json()
    assert page["attitude_rating"] == 4
    assert page["attitude_breakdown"]["4"] == 1


def test_rate_rejects_out_of_range(client, customer, vendor_user, completed_order, auth_headers):
    resp = client.post(
        f"/api/vendors/{vendor_user.vendor_profile.id}/rate", headers=auth_headers(customer), json={"rating": 6}
    )
    assert resp.status_code == 422


def test_retract_and_report_over_http(client, customer, vendor_user, completed_order, auth_headers):
    vendor_id = vendor_user.vendor_profile.id
    rating = client.post(
        f"/api/vendors/{vendor_id}/rate", headers=auth_headers(customer), json={"rating": 1}
    ).json()

    resp = client.post(f"/api/ratings/{rating['id']}/report", headers=auth_headers(vendor_user), json={"reason": "Fake"})
    assert resp.status_code == 200
    resp = client.post(f"/api/ratings/{rating['id']}/report", headers=auth_headers(vendor_user))
    assert resp.json()["code"] == "already_reported"

    assert client.delete(f"/api/ratings/{rating['id']}", headers=auth_headers(vendor_user)).status_code == 403
    assert client.delete(f"/api/ratings/{rating['id']}", headers=auth_headers(customer)).status_code == 200

    resp = client.get(f"/api/ratings/{rating['id']}", headers=auth_headers(customer))
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False
    assert client.get(f"/api/vendors/{vendor_id}").json()["total_ratings"] == 0
