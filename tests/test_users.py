from database import Account, AuthToken, Category, Expense, User
from conftest import register


class TestProfile:
    def test_profile_returns_current_user(self, client, user):
        response = client.get("/api/users/me", headers=user["headers"])
        assert response.status_code == 200
        profile = response.json()["user"]
        assert profile["id"] == user["user"]["id"]
        assert profile["name"] == "Ada"
        assert "created_at" in profile

    def test_update_name_keeps_email(self, client, user):
        response = client.patch(
            "/api/users/me", json={"name": "Ada Lovelace"}, headers=user["headers"]
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Profile updated successfully."
        assert body["user"]["name"] == "Ada Lovelace"
        assert body["user"]["email"] == "ada@example.com"

    def test_update_email(self, client, user):
        response = client.patch(
            "/api/users/me", json={"email": "lovelace@example.com"}, headers=user["headers"]
        )
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "lovelace@example.com"

    def test_update_to_taken_email_conflicts(self, client, user, other_user):
        response = client.patch(
            "/api/users/me", json={"email": "grace@example.com"}, headers=user["headers"]
        )
        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    def test_update_to_own_email_is_allowed(self, client, user):
        response = client.patch(
            "/api/users/me", json={"email": "ada@example.com"}, headers=user["headers"]
        )
        assert response.status_code == 200


class TestDeleteAccount:
    def test_delete_cascades(self, client, db_session, user, other_user):
        headers = user["headers"]
        client.post(
            "/api/expenses",
            json={"title": "Rent", "amount": 900, "category": "expense"},
            headers=headers,
        )
        client.post("/api/categories", json={"name": "Housing"}, headers=headers)
        client.post("/api/accounts", json={"name": "Checking"}, headers=headers)
        client.post(
            "/api/expenses",
            json={"title": "Salary", "amount": 3000, "category": "income"},
            headers=other_user["headers"],
        )

        response = client.delete("/api/users/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Account deleted successfully."

        user_id = user["user"]["id"]
        assert db_session.query(User).filter_by(id=user_id).count() == 0
        for model in (AuthToken, Expense, Category, Account):
            assert db_session.query(model).filter_by(user_id=user_id).count() == 0

        # the other user is untouched
        assert db_session.query(Expense).filter_by(user_id=other_user["user"]["id"]).count() == 1

    def test_token_unusable_after_delete(self, client, user):
        client.delete("/api/users/me", headers=user["headers"])
        assert client.get("/api/users/me", headers=user["headers"]).status_code == 401

    def test_email_free_after_delete(self, client, user):
        client.delete("/api/users/me", headers=user["headers"])
        register(client)
