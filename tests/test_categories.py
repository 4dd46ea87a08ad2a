import uuid


class TestCategories:
    def test_add_category(self, client, user):
        response = client.post("/api/categories", json={"name": "Food"}, headers=user["headers"])
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Category created successfully."
        assert body["category"]["name"] == "Food"
        assert body["category"]["user_id"] == user["user"]["id"]

    def test_duplicate_name_conflicts(self, client, user):
        client.post("/api/categories", json={"name": "Food"}, headers=user["headers"])
        response = client.post("/api/categories", json={"name": "Food"}, headers=user["headers"])
        assert response.status_code == 409
        assert response.json() == {
            "code": "CONFLICT",
            "detail": "A category with this name already exists for the user.",
        }

    def test_same_name_for_different_users(self, client, user, other_user):
        first = client.post("/api/categories", json={"name": "Food"}, headers=user["headers"])
        second = client.post(
            "/api/categories", json={"name": "Food"}, headers=other_user["headers"]
        )
        assert first.status_code == 201
        assert second.status_code == 201

    def test_empty_name_rejected(self, client, user):
        response = client.post("/api/categories", json={"name": ""}, headers=user["headers"])
        assert response.status_code == 422

    def test_list_sorted_and_scoped(self, client, user, other_user):
        for name in ("Travel", "Food", "Bills"):
            client.post("/api/categories", json={"name": name}, headers=user["headers"])
        client.post("/api/categories", json={"name": "Pets"}, headers=other_user["headers"])

        response = client.get("/api/categories", headers=user["headers"])
        assert [c["name"] for c in response.json()] == ["Bills", "Food", "Travel"]

    def test_remove_category(self, client, user):
        category = client.post(
            "/api/categories", json={"name": "Food"}, headers=user["headers"]
        ).json()["category"]
        response = client.delete(f"/api/categories/{category['id']}", headers=user["headers"])
        assert response.status_code == 200
        assert response.json()["message"] == "Category removed successfully."
        assert client.get("/api/categories", headers=user["headers"]).json() == []

    def test_remove_missing_not_found(self, client, user):
        response = client.delete(f"/api/categories/{uuid.uuid4()}", headers=user["headers"])
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_remove_other_users_category_not_found(self, client, user, other_user):
        category = client.post(
            "/api/categories", json={"name": "Food"}, headers=other_user["headers"]
        ).json()["category"]
        response = client.delete(f"/api/categories/{category['id']}", headers=user["headers"])
        assert response.status_code == 404
