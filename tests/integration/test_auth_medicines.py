"""Integration tests for authentication and the medicine catalog."""


class TestAuth:
    """Tests for /api/auth."""

    def test_register_and_me(self, client, login_as) -> None:
        headers = login_as("luis@example.com", timezone="Europe/Madrid")
        response = client.get("/api/auth/me", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "luis@example.com"
        assert body["timezone"] == "Europe/Madrid"
        assert "hashed_password" not in body

    def test_duplicate_email(self, client, auth_headers) -> None:
        response = client.post(
            "/api/auth/register",
            json={
                "email": "ana@example.com",
                "name": "Ana",
                "password": "secreto123",
                "confirm_password": "secreto123",
            },
        )
        assert response.status_code == 400

    def test_password_mismatch(self, client) -> None:
        response = client.post(
            "/api/auth/register",
            json={
                "email": "x@example.com",
                "name": "X",
                "password": "secreto123",
                "confirm_password": "otra-cosa",
            },
        )
        assert response.status_code == 422

    def test_unknown_timezone_rejected(self, client) -> None:
        response = client.post(
            "/api/auth/register",
            json={
                "email": "x@example.com",
                "name": "X",
                "password": "secreto123",
                "confirm_password": "secreto123",
                "timezone": "Mars/Olympus",
            },
        )
        assert response.status_code == 422

    def test_wrong_password(self, client, auth_headers) -> None:
        response = client.post(
            "/api/auth/login",
            data={"username": "ana@example.com", "password": "incorrecta"},
        )
        assert response.status_code == 401

    def test_requires_token(self, client, db) -> None:
        assert client.get("/api/auth/me").status_code == 401
        assert client.get("/api/medicines/").status_code == 401
        assert client.get("/api/reminder-logs/analytics").status_code == 401

    def test_preferences_defaults_and_partial_update(self, client, auth_headers) -> None:
        me = client.get("/api/auth/me", headers=auth_headers).json()
        assert me["preferences"] == {
            "email_notifications": True,
            "push_notifications": True,
            "reminder_advance_minutes": 15,
            "default_view": "daily",
        }

        response = client.put(
            "/api/auth/me/preferences",
            json={"default_view": "weekly", "reminder_advance_minutes": 30},
            headers=auth_headers,
        )
        assert response.status_code == 200
        response = client.put(
            "/api/auth/me/preferences", json={"push_notifications": False}, headers=auth_headers
        )
        prefs = response.json()["preferences"]
        assert prefs["default_view"] == "weekly"
        assert prefs["reminder_advance_minutes"] == 30
        assert prefs["push_notifications"] is False

    def test_preferences_validation(self, client, auth_headers) -> None:
        for payload in ({"reminder_advance_minutes": 90}, {"default_view": "monthly"}):
            response = client.put("/api/auth/me/preferences", json=payload, headers=auth_headers)
            assert response.status_code == 422

    def test_update_profile_timezone(self, client, auth_headers) -> None:
        response = client.put(
            "/api/auth/me", json={"timezone": "America/New_York"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["timezone"] == "America/New_York"


class TestMedicines:
    """Tests for /api/medicines."""

    def test_create_and_get(self, client, auth_headers, medicine) -> None:
        assert medicine["name"] == "Metformin"
        assert medicine["times"] == ["08:00", "20:00"]
        assert medicine["frequency"] == "daily"
        assert medicine["is_active"] is True

        response = client.get(f"/api/medicines/{medicine['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["dosage"] == "500mg"

    def test_times_are_normalized(self, client, auth_headers) -> None:
        response = client.post(
            "/api/medicines/",
            json={"name": "Aspirin", "dosage": "100mg", "times": ["8:00", "08:00", "21:30"]},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["times"] == ["08:00", "21:30"]

    def test_invalid_time(self, client, auth_headers) -> None:
        response = client.post(
            "/api/medicines/",
            json={"name": "Aspirin", "dosage": "100mg", "times": ["25:00"]},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_update_and_filter_active(self, client, auth_headers, medicine) -> None:
        response = client.put(
            f"/api/medicines/{medicine['id']}",
            json={"is_active": False},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        active = client.get("/api/medicines/?active=true", headers=auth_headers).json()
        inactive = client.get("/api/medicines/?active=false", headers=auth_headers).json()
        assert active == []
        assert [item["id"] for item in inactive] == [medicine["id"]]

    def test_other_user_cannot_see(self, client, medicine, login_as) -> None:
        other = login_as("otro@example.com")

        assert client.get(f"/api/medicines/{medicine['id']}", headers=other).status_code == 404
        assert client.get("/api/medicines/", headers=other).json() == []

    def test_delete(self, client, auth_headers, medicine) -> None:
        response = client.delete(f"/api/medicines/{medicine['id']}", headers=auth_headers)
        assert response.status_code == 204

        response = client.get(f"/api/medicines/{medicine['id']}", headers=auth_headers)
        assert response.status_code == 404


class TestInventory:
    """Tests for medicine inventory and its decrement on taken doses."""

    def stock(self, client, headers, medicine_id) -> dict:
        return client.get(f"/api/medicines/{medicine_id}", headers=headers).json()

    def test_defaults(self, medicine) -> None:
        assert medicine["inventory_count"] == 0
        assert medicine["doses_per_intake"] == 1
        assert medicine["low_inventory_threshold"] == 5
        assert medicine["days_remaining"] == 0
        assert medicine["is_low_inventory"] is True

    def test_taken_doses_consume_stock(self, client, auth_headers) -> None:
        medicine = client.post(
            "/api/medicines/",
            json={
                "name": "Ibuprofen",
                "dosage": "400mg",
                "times": ["08:00", "20:00"],
                "inventory_count": 20,
                "doses_per_intake": 2,
            },
            headers=auth_headers,
        ).json()
        assert medicine["days_remaining"] == 5

        client.post(
            "/api/reminder-logs/",
            json={"medicine_id": medicine["id"], "time": "08:00", "status": "taken"},
            headers=auth_headers,
        )
        client.post("/api/reminder-logs/log", json={"medicine_id": medicine["id"]}, headers=auth_headers)
        assert self.stock(client, auth_headers, medicine["id"])["inventory_count"] == 16

        pending = client.post(
            "/api/reminder-logs/",
            json={"medicine_id": medicine["id"], "time": "20:00"},
            headers=auth_headers,
        ).json()
        assert self.stock(client, auth_headers, medicine["id"])["inventory_count"] == 16

        client.put(
            f"/api/reminder-logs/{pending['id']}", json={"status": "taken"}, headers=auth_headers
        )
        client.put(
            f"/api/reminder-logs/{pending['id']}", json={"status": "taken"}, headers=auth_headers
        )
        assert self.stock(client, auth_headers, medicine["id"])["inventory_count"] == 14

    def test_missed_doses_keep_stock(self, client, auth_headers) -> None:
        medicine = client.post(
            "/api/medicines/",
            json={"name": "Zinc", "dosage": "50mg", "inventory_count": 3},
            headers=auth_headers,
        ).json()
        client.post(
            "/api/reminder-logs/log",
            json={"medicine_id": medicine["id"], "status": "missed"},
            headers=auth_headers,
        )
        assert self.stock(client, auth_headers, medicine["id"])["inventory_count"] == 3

    def test_never_below_zero(self, client, auth_headers) -> None:
        medicine = client.post(
            "/api/medicines/",
            json={"name": "Zinc", "dosage": "50mg", "inventory_count": 1, "doses_per_intake": 2},
            headers=auth_headers,
        ).json()
        client.post("/api/reminder-logs/log", json={"medicine_id": medicine["id"]}, headers=auth_headers)
        assert self.stock(client, auth_headers, medicine["id"])["inventory_count"] == 0

    def test_status_lists_low_stock_first(self, client, auth_headers) -> None:
        for name, count in [("Amlodipine", 40), ("Zinc", 2), ("Retired", 0)]:
            created = client.post(
                "/api/medicines/",
                json={"name": name, "dosage": "5mg", "times": ["08:00"], "inventory_count": count},
                headers=auth_headers,
            ).json()
            if name == "Retired":
                client.put(
                    f"/api/medicines/{created['id']}", json={"is_active": False}, headers=auth_headers
                )

        response = client.get("/api/medicines/inventory", headers=auth_headers)
        body = response.json()

        assert response.status_code == 200
        assert body["count"] == 2
        assert [item["name"] for item in body["data"]] == ["Zinc", "Amlodipine"]
        assert body["data"][0]["is_low_inventory"] is True
        assert body["data"][1]["days_remaining"] == 40

    def test_refill_adjust_set(self, client, auth_headers) -> None:
        medicine = client.post(
            "/api/medicines/",
            json={"name": "Zinc", "dosage": "50mg", "inventory_count": 4, "refill_amount": 10},
            headers=auth_headers,
        ).json()
        url = f"/api/medicines/{medicine['id']}/inventory"

        refill = client.put(url, json={"action": "refill"}, headers=auth_headers).json()
        assert refill["medicine"]["inventory_count"] == 14
        assert refill["medicine"]["last_refill_date"] is not None

        adjust = client.put(url, json={"action": "adjust", "amount": -20}, headers=auth_headers)
        assert adjust.json()["medicine"]["inventory_count"] == 0

        set_to = client.put(url, json={"action": "set", "amount": 12}, headers=auth_headers)
        assert set_to.json()["medicine"]["inventory_count"] == 12
        assert set_to.json()["medicine"]["is_low_inventory"] is False

    def test_invalid_inventory_updates(self, client, auth_headers, medicine, login_as) -> None:
        url = f"/api/medicines/{medicine['id']}/inventory"

        assert client.put(url, json={"action": "set"}, headers=auth_headers).status_code == 422
        assert client.put(url, json={"action": "set", "amount": -1}, headers=auth_headers).status_code == 422
        assert client.put(url, json={"action": "steal", "amount": 1}, headers=auth_headers).status_code == 422

        other = login_as("otro@example.com")
        assert client.put(url, json={"action": "refill"}, headers=other).status_code == 404
