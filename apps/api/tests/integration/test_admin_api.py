import uuid

from sqlalchemy import update
from sqlalchemy.exc import OperationalError

import storefront.routers.admin_orders as admin_orders_module
from storefront.models.order import Order


def test_admin_routes_require_admin_role(client, auth_headers, bypass_disabled):
    assert client.get("/api/v1/admin/orders").status_code == 401
    assert client.get("/api/v1/admin/notifications").status_code == 401
    assert client.get("/metrics").status_code == 401

    customer = client.get("/api/v1/admin/orders", headers=auth_headers["customer"])
    assert customer.status_code == 403

    admin = client.get("/api/v1/admin/orders", headers=auth_headers["admin"])
    assert admin.status_code == 200


def test_list_orders_with_filters_and_total_amount(client, place_order):
    place_order(name="Asha Rao")
    place_order(name="Meera Iyer", orderType="rental")

    everything = client.get("/api/v1/admin/orders").json()
    assert everything["total"] == 2
    assert [item["customer_name"] for item in everything["items"]] == ["Meera Iyer", "Asha Rao"]
    assert everything["items"][0]["total_amount"] == 3000

    rentals = client.get("/api/v1/admin/orders", params={"type": "rental"}).json()
    assert [item["customer_name"] for item in rentals["items"]] == ["Meera Iyer"]

    searched = client.get("/api/v1/admin/orders", params={"search": "ASHA"}).json()
    assert [item["customer_name"] for item in searched["items"]] == ["Asha Rao"]

    paged = client.get("/api/v1/admin/orders", params={"page": 2, "page_size": 1}).json()
    assert paged["page"] == 2
    assert [item["customer_name"] for item in paged["items"]] == ["Asha Rao"]

    invalid = client.get("/api/v1/admin/orders", params={"status": "shipped"})
    assert invalid.status_code == 422


def test_order_detail_includes_enrichment(client, place_order):
    order_id = place_order()["order_id"]

    detail = client.get(f"/api/v1/admin/orders/{order_id}")

    assert detail.status_code == 200
    body = detail.json()
    assert body["status"] == "new"
    assert body["customer"]["gst_number"] == "29ABCDE1234F1Z5"
    assert body["shipping_address"]["address_type"] == "shipping"
    assert body["billing_address"]["address_type"] == "billing"
    assert body["billing_address"]["city"] == body["shipping_address"]["city"]
    assert body["payment"] == {"payment_type": "pay_on_delivery", "payment_status": "unpaid"}

    missing = client.get(f"/api/v1/admin/orders/{uuid.uuid4()}")
    assert missing.status_code == 404


def test_status_transitions(client, place_order):
    order_id = place_order()["order_id"]
    url = f"/api/v1/admin/orders/{order_id}/status"

    skipped = client.patch(url, json={"status": "completed"})
    assert skipped.status_code == 409
    assert skipped.json()["detail"] == "Invalid state transition: new -> completed"

    assert client.patch(url, json={"status": "processing"}).json()["status"] == "processing"
    assert client.patch(url, json={"status": "completed"}).json()["status"] == "completed"
    assert client.patch(url, json={"status": "cancelled"}).status_code == 409


def test_export_csv(client, place_order):
    assert client.get("/api/v1/admin/orders/export").status_code == 404

    order_number = place_order()["order_number"]
    response = client.get("/api/v1/admin/orders/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=" in response.headers["content-disposition"]
    lines = response.text.strip().split("\n")
    assert lines[0].startswith('"Order ID","Customer Name"')
    assert lines[1].startswith(f'"{order_number}","Asha Rao","asha@example.com"')
    assert '"purchase","new","3000"' in lines[1]


def test_delete_and_reset_orders(client, place_order):
    first = place_order()["order_id"]
    place_order()
    place_order()

    assert client.delete(f"/api/v1/admin/orders/{first}").status_code == 204
    assert client.get(f"/api/v1/admin/orders/{first}").status_code == 404

    reset = client.post("/api/v1/admin/orders/reset")
    assert reset.json() == {"deleted": 2}
    assert client.get("/api/v1/admin/orders").json()["total"] == 0


def test_notifications_flow(client, place_order):
    placed = place_order()
    place_order(name="Meera Iyer")

    listing = client.get("/api/v1/admin/notifications").json()
    assert listing["unread_count"] == 2
    newest = listing["items"][0]
    assert newest["title"] == "New Order Received"
    assert newest["message"].endswith("from Meera Iyer")
    assert newest["type"] == "order"
    assert listing["items"][1]["reference_id"] == placed["order_id"]

    read = client.post(f"/api/v1/admin/notifications/{newest['id']}/read")
    assert read.json()["is_read"] is True
    assert client.get("/api/v1/admin/notifications").json()["unread_count"] == 1

    assert client.post("/api/v1/admin/notifications/read-all").json() == {"updated": 1}

    deleted = client.delete(f"/api/v1/admin/notifications/{newest['id']}")
    assert deleted.status_code == 204
    assert len(client.get("/api/v1/admin/notifications").json()["items"]) == 1

    missing = client.post(f"/api/v1/admin/notifications/{uuid.uuid4()}/read")
    assert missing.status_code == 404


def test_database_errors_return_503(client, monkeypatch):
    def unavailable(*_args, **_kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(admin_orders_module, "list_orders", unavailable)

    response = client.get("/api/v1/admin/orders")

    assert response.status_code == 503
    assert response.json() == {"detail": "Database unavailable"}


def test_order_detail_exposes_internal_notes(client, db_session, place_order):
    order_id = place_order()["order_id"]
    assert client.get(f"/api/v1/admin/orders/{order_id}").json()["internal_notes"] is None

    db_session.execute(
        update(Order)
        .where(Order.id == uuid.UUID(order_id))
        .values(internal_notes="Call before delivery", rental_duration="monthly")
    )
    db_session.commit()

    body = client.get(f"/api/v1/admin/orders/{order_id}").json()
    assert body["internal_notes"] == "Call before delivery"
    assert body["rental_duration"] == "monthly"
    listed = client.get("/api/v1/admin/orders").json()["items"][0]
    assert listed["internal_notes"] == "Call before delivery"
