"""
Tests for branch, table, category, menu and add-on endpoints.
"""

from food_api.models import AddOn


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class TestBranches:
    def test_owner_creates_branch(self, client, owner_headers):
        response = client.post(
            "/api/branches",
            json={"name": "Riverside", "address": "9 Quay Rd"},
            headers=owner_headers,
        )
        assert response.status_code == 201
        assert response.json()["name"] == "Riverside"

    def test_manager_cannot_create_branch(self, client, manager_headers):
        response = client.post("/api/branches", json={"name": "Riverside"}, headers=manager_headers)
        assert response.status_code == 403

    def test_update_branch(self, client, owner_headers, seed_branch):
        response = client.patch(
            f"/api/branches/{seed_branch.id}",
            json={"contact": "+1 555 0199"},
            headers=owner_headers,
        )
        assert response.status_code == 200
        assert response.json()["contact"] == "+1 555 0199"
        assert response.json()["name"] == "Main Branch"

    def test_branch_with_tables_cannot_be_deleted(self, client, owner_headers, seed_table):
        response = client.delete(f"/api/branches/{seed_table.branch_id}", headers=owner_headers)
        assert response.status_code == 409

    def test_delete_empty_branch(self, client, owner_headers, other_branch):
        response = client.delete(f"/api/branches/{other_branch.id}", headers=owner_headers)
        assert response.status_code == 204
        assert client.get(f"/api/branches/{other_branch.id}", headers=owner_headers).status_code == 404


class TestTables:
    def test_create_and_list(self, client, manager_headers, seed_branch):
        created = client.post(
            "/api/tables",
            json={"branch_id": seed_branch.id, "name": "Patio 2", "capacity": 6},
            headers=manager_headers,
        )
        assert created.status_code == 201

        listed = client.get("/api/tables", params={"branch_id": seed_branch.id}, headers=manager_headers)
        assert [t["name"] for t in listed.json()] == ["Patio 2"]

    def test_unknown_branch(self, client, manager_headers, seed_branch):
        response = client.post(
            "/api/tables",
            json={"branch_id": 99999, "name": "Ghost"},
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_BRANCH"

    def test_zero_capacity_is_malformed(self, client, manager_headers, seed_branch):
        response = client.post(
            "/api/tables",
            json={"branch_id": seed_branch.id, "name": "Bar", "capacity": 0},
            headers=manager_headers,
        )
        assert response.status_code == 422

    def test_table_with_orders_cannot_be_deleted(self, client, manager_headers, make_order):
        order = make_order()
        response = client.delete(f"/api/tables/{order.table_id}", headers=manager_headers)
        assert response.status_code == 409


class TestCategories:
    def test_category_in_use_cannot_be_deleted(self, client, manager_headers, seed_menu):
        response = client.delete(f"/api/categories/{seed_menu.category_id}", headers=manager_headers)
        assert response.status_code == 409

    def test_list_requires_branch(self, client, staff_headers, seed_category):
        response = client.get("/api/categories", headers=staff_headers)
        assert response.status_code == 422

        listed = client.get("/api/categories", params={"branch_id": seed_category.branch_id}, headers=staff_headers)
        assert [c["title"] for c in listed.json()] == ["Mains"]


class TestMenus:
    def test_create_menu(self, client, manager_headers, seed_category):
        response = client.post(
            "/api/menus",
            json={
                "branch_id": seed_category.branch_id,
                "category_id": seed_category.id,
                "title": "Beef Rendang",
                "price": "12.50",
                "discount": "0.50",
            },
            headers=manager_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["price"] == "12.50"
        assert data["discount"] == "0.50"
        assert data["is_available"] is True

    def test_discount_above_price(self, client, manager_headers, seed_category):
        response = client.post(
            "/api/menus",
            json={
                "branch_id": seed_category.branch_id,
                "category_id": seed_category.id,
                "title": "Too Cheap",
                "price": "5.00",
                "discount": "6.00",
            },
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_price_with_three_decimals_is_malformed(self, client, manager_headers, seed_category):
        response = client.post(
            "/api/menus",
            json={
                "branch_id": seed_category.branch_id,
                "category_id": seed_category.id,
                "title": "Odd Price",
                "price": "5.005",
            },
            headers=manager_headers,
        )
        assert response.status_code == 422

    def test_category_of_other_branch(self, client, manager_headers, seed_category, other_branch):
        response = client.post(
            "/api/menus",
            json={
                "branch_id": other_branch.id,
                "category_id": seed_category.id,
                "title": "Misplaced",
                "price": "3.00",
            },
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_CATEGORY"

    def test_lowering_price_below_discount(self, client, manager_headers, seed_menu):
        response = client.patch(f"/api/menus/{seed_menu.id}", json={"price": "0.50"}, headers=manager_headers)
        assert response.status_code == 400

    def test_update_availability(self, client, manager_headers, seed_menu):
        response = client.patch(
            f"/api/menus/{seed_menu.id}",
            json={"is_available": False},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json()["is_available"] is False
        assert response.json()["price"] == "10.00"

    def test_get_includes_add_ons(self, client, staff_headers, seed_add_on):
        response = client.get(f"/api/menus/{seed_add_on.menu_id}", headers=staff_headers)
        assert [a["title"] for a in response.json()["add_ons"]] == ["Extra Rice"]

    def test_staff_cannot_edit(self, client, staff_headers, seed_menu):
        response = client.patch(f"/api/menus/{seed_menu.id}", json={"title": "Renamed"}, headers=staff_headers)
        assert response.status_code == 403

    def test_list_by_branch_and_category(self, client, staff_headers, seed_menu, other_menu):
        by_branch = client.get("/api/menus", params={"branch_id": seed_menu.branch_id}, headers=staff_headers)
        by_category = client.get(
            "/api/menus",
            params={"category_id": seed_menu.category_id, "limit": 1},
            headers=staff_headers,
        )
        assert len(by_branch.json()) == 2
        assert len(by_category.json()) == 1

    def test_list_without_scope(self, client, staff_headers, seed_menu):
        response = client.get("/api/menus", headers=staff_headers)
        assert response.status_code == 400

    def test_search_is_case_insensitive(self, client, staff_headers, seed_menu, other_menu):
        response = client.get(
            "/api/menus/search",
            params={"branch_id": seed_menu.branch_id, "title": "curry"},
            headers=staff_headers,
        )
        assert [m["title"] for m in response.json()] == ["Chicken Curry"]

    def test_search_treats_wildcards_literally(self, client, staff_headers, seed_menu):
        response = client.get(
            "/api/menus/search",
            params={"branch_id": seed_menu.branch_id, "title": "%"},
            headers=staff_headers,
        )
        assert response.json() == []

    def test_delete_menu_removes_add_ons_and_covers(
        self, client, manager_headers, db_session, blob_store, seed_add_on
    ):
        menu_id = seed_add_on.menu_id
        add_on_id = seed_add_on.id
        client.put(
            f"/api/add-ons/{add_on_id}/cover",
            files={"file": ("rice.png", PNG_BYTES, "image/png")},
            headers=manager_headers,
        )
        assert len(blob_store.objects) == 1

        response = client.delete(f"/api/menus/{menu_id}", headers=manager_headers)

        assert response.status_code == 204
        db_session.expire_all()
        assert db_session.get(AddOn, add_on_id) is None
        assert blob_store.objects == {}


class TestCovers:
    def test_upload_replaces_previous(self, client, manager_headers, blob_store, seed_menu):
        first = client.put(
            f"/api/menus/{seed_menu.id}/cover",
            files={"file": ("a.png", PNG_BYTES, "image/png")},
            headers=manager_headers,
        )
        second = client.put(
            f"/api/menus/{seed_menu.id}/cover",
            files={"file": ("b.jpg", b"\xff\xd8\xff" + b"\x00" * 32, "image/jpeg")},
            headers=manager_headers,
        )

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["cover_url"].endswith(".jpg")
        assert len(blob_store.objects) == 1

    def test_rejects_non_image(self, client, manager_headers, blob_store, seed_menu):
        response = client.put(
            f"/api/menus/{seed_menu.id}/cover",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert blob_store.objects == {}

    def test_remove_cover(self, client, manager_headers, blob_store, seed_menu):
        client.put(
            f"/api/menus/{seed_menu.id}/cover",
            files={"file": ("a.png", PNG_BYTES, "image/png")},
            headers=manager_headers,
        )
        response = client.delete(f"/api/menus/{seed_menu.id}/cover", headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["cover_url"] is None
        assert blob_store.objects == {}


class TestAddOns:
    def test_create_free_standing(self, client, manager_headers, seed_branch):
        response = client.post(
            "/api/add-ons",
            json={"title": "Fried Egg", "price": "1.50"},
            headers=manager_headers,
        )
        assert response.status_code == 201
        assert response.json()["menu_id"] is None
        assert response.json()["price"] == "1.50"

    def test_unknown_menu(self, client, manager_headers, seed_branch):
        response = client.post(
            "/api/add-ons",
            json={"menu_id": 99999, "title": "Orphan", "price": "1.00"},
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_MENU_REFERENCE"

    def test_list_by_menu(self, client, staff_headers, seed_add_on, other_menu):
        response = client.get("/api/add-ons", params={"menu_id": other_menu.id}, headers=staff_headers)
        assert response.json() == []
        response = client.get("/api/add-ons", params={"menu_id": seed_add_on.menu_id}, headers=staff_headers)
        assert [a["id"] for a in response.json()] == [seed_add_on.id]

    def test_delete(self, client, manager_headers, seed_add_on):
        assert client.delete(f"/api/add-ons/{seed_add_on.id}", headers=manager_headers).status_code == 204
        assert client.get(f"/api/add-ons/{seed_add_on.id}", headers=manager_headers).status_code == 404
