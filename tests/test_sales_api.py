"""
Tests for sale endpoints.
"""

from sqlalchemy import func, select

from food_api.models import Order, Sale
from food_shared.config.constants import OrderStatus


def sale_body(table, order_ids, **extra):
    return {"branch_id": table.branch_id, "table_id": table.id, "order_ids": order_ids, **extra}


class TestCreateSale:
    def test_settles_orders(self, client, assistant_headers, db_session, seed_table, make_order):
        o1 = make_order(6000)
        o2 = make_order(4000)

        response = client.post(
            "/api/sales",
            json=sale_body(seed_table, [o1.id, o2.id], discount="10.00", tax="5.00", payment_method="CASH"),
            headers=assistant_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["total"] == "100.00"
        assert data["discount"] == "10.00"
        assert data["tax"] == "5.00"
        assert data["grand_total"] == "95.00"
        assert data["order_ids"] == [o1.id, o2.id]
        assert data["payment_method"] == "CASH"

        db_session.expire_all()
        for order_id in (o1.id, o2.id):
            order = db_session.get(Order, order_id)
            assert order.status == OrderStatus.COMPLETED
            assert order.is_paid is True

    def test_staff_cannot_settle(self, client, staff_headers, seed_table, make_order):
        order = make_order()
        response = client.post("/api/sales", json=sale_body(seed_table, [order.id]), headers=staff_headers)
        assert response.status_code == 403

    def test_missing_order_changes_nothing(self, client, assistant_headers, db_session, seed_table, make_order):
        o1 = make_order(6000)

        response = client.post(
            "/api/sales",
            json=sale_body(seed_table, [o1.id, 99999]),
            headers=assistant_headers,
        )

        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "ORDER_NOT_FOUND"
        assert body["partial"] is False
        db_session.expire_all()
        assert db_session.get(Order, o1.id).status == OrderStatus.IN_PROGRESS
        assert db_session.scalar(select(func.count()).select_from(Sale)) == 0

    def test_pending_order_rejected(self, client, assistant_headers, seed_table, make_order):
        order = make_order(status=OrderStatus.PENDING)
        response = client.post("/api/sales", json=sale_body(seed_table, [order.id]), headers=assistant_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_TRANSITION"

    def test_order_cannot_be_settled_twice(self, client, assistant_headers, seed_table, make_order):
        order = make_order()
        first = client.post("/api/sales", json=sale_body(seed_table, [order.id]), headers=assistant_headers)
        second = client.post("/api/sales", json=sale_body(seed_table, [order.id]), headers=assistant_headers)
        assert first.status_code == 201
        assert second.status_code == 409

    def test_empty_order_list(self, client, assistant_headers, seed_table):
        response = client.post("/api/sales", json=sale_body(seed_table, []), headers=assistant_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    def test_negative_discount_is_malformed(self, client, assistant_headers, seed_table, make_order):
        order = make_order()
        response = client.post(
            "/api/sales",
            json=sale_body(seed_table, [order.id], discount="-1.00"),
            headers=assistant_headers,
        )
        assert response.status_code == 422

    def test_discount_above_total_gives_negative_grand_total(
        self, client, assistant_headers, seed_table, make_order
    ):
        order = make_order(500)
        response = client.post(
            "/api/sales",
            json=sale_body(seed_table, [order.id], discount="8.00"),
            headers=assistant_headers,
        )
        assert response.status_code == 201
        assert response.json()["grand_total"] == "-3.00"


class TestReadAndDeleteSale:
    def test_get_and_list(self, client, assistant_headers, seed_table, make_order):
        order = make_order(1250)
        created = client.post("/api/sales", json=sale_body(seed_table, [order.id]), headers=assistant_headers).json()

        fetched = client.get(f"/api/sales/{created['id']}", headers=assistant_headers)
        listed = client.get("/api/sales", params={"branch_id": seed_table.branch_id}, headers=assistant_headers)

        assert fetched.json()["grand_total"] == "12.50"
        assert [s["id"] for s in listed.json()] == [created["id"]]

    def test_unknown_sale(self, client, assistant_headers, seed_branch):
        response = client.get("/api/sales/99999", headers=assistant_headers)
        assert response.status_code == 404

    def test_manager_deletes_sale_orders_stay_completed(
        self, client, assistant_headers, manager_headers, db_session, seed_table, make_order
    ):
        order = make_order()
        created = client.post("/api/sales", json=sale_body(seed_table, [order.id]), headers=assistant_headers).json()

        assert client.delete(f"/api/sales/{created['id']}", headers=assistant_headers).status_code == 403
        response = client.delete(f"/api/sales/{created['id']}", headers=manager_headers)

        assert response.status_code == 204
        db_session.expire_all()
        assert db_session.get(Sale, created["id"]) is None
        assert db_session.get(Order, order.id).status == OrderStatus.COMPLETED
