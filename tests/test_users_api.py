import pytest

from tests.conftest import api_error

AUTH = {"Authorization": "Bearer valid-token"}


class TestUserPreferences:
    async def test_defaults_when_no_row(self, api_client):
        client = await api_client()

        resp = await client.get("/api/user_preferences", headers=AUTH)
        assert resp.status == 200
        body = await resp.json()

        assert body == {
            "user_id": "user-1",
            "lakshmi_onboarding_completed": False,
            "lakshmi_preferences": {},
        }

    async def test_save_then_read(self, api_client, fake_supabase):
        client = await api_client()

        resp = await client.post(
            "/api/user_preferences",
            headers=AUTH,
            json={
                "lakshmi_onboarding_completed": True,
                "lakshmi_preferences": {"budget": 1500, "areas": ["Camden"]},
            },
        )
        assert resp.status == 200
        saved = await resp.json()
        assert saved["user_id"] == "user-1"
        assert saved["lakshmi_onboarding_completed"] is True

        resp = await client.get("/api/user_preferences", headers=AUTH)
        body = await resp.json()
        assert body["lakshmi_preferences"] == {"budget": 1500, "areas": ["Camden"]}
        assert len(fake_supabase.tables["user_preferences"]) == 1

    async def test_partial_save_keeps_other_fields(self, api_client):
        client = await api_client()

        await client.post(
            "/api/user_preferences",
            headers=AUTH,
            json={"lakshmi_preferences": {"budget": 1500}},
        )
        resp = await client.post(
            "/api/user_preferences",
            headers=AUTH,
            json={"lakshmi_onboarding_completed": True},
        )
        assert resp.status == 200

        resp = await client.get("/api/user_preferences", headers=AUTH)
        body = await resp.json()
        assert body["lakshmi_onboarding_completed"] is True
        assert body["lakshmi_preferences"] == {"budget": 1500}

    async def test_missing_table_returns_defaults(self, api_client, fake_supabase):
        fake_supabase.errors["user_preferences"] = api_error(
            'relation "public.user_preferences" does not exist', code="42P01"
        )
        client = await api_client()

        resp = await client.get("/api/user_preferences", headers=AUTH)
        assert resp.status == 200
        body = await resp.json()
        assert body["user_id"] == "user-1"
        assert body["lakshmi_onboarding_completed"] is False

    async def test_missing_table_on_save_echoes_values(self, api_client, fake_supabase):
        fake_supabase.errors["user_preferences"] = api_error(
            'relation "public.user_preferences" does not exist', code="42P01"
        )
        client = await api_client()

        resp = await client.post(
            "/api/user_preferences",
            headers=AUTH,
            json={"lakshmi_onboarding_completed": True},
        )
        assert resp.status == 200
        body = await resp.json()
        assert body == {"user_id": "user-1", "lakshmi_onboarding_completed": True}

    async def test_save_failure(self, api_client, fake_supabase):
        fake_supabase.errors["user_preferences"] = api_error("disk full")
        client = await api_client()

        resp = await client.post("/api/user_preferences", headers=AUTH, json={})
        assert resp.status == 500
        body = await resp.json()
        assert body["error"]["message"] == "Failed to save preferences"

    async def test_invalid_payload(self, api_client):
        client = await api_client()

        resp = await client.post(
            "/api/user_preferences",
            headers=AUTH,
            json={"lakshmi_preferences": "not-an-object"},
        )
        assert resp.status == 400

    @pytest.mark.parametrize(
        "headers, message",
        [
            ({}, "Unauthorized"),
            ({"Authorization": "Token abc"}, "Unauthorized"),
            ({"Authorization": "Bearer expired"}, "Invalid token"),
        ],
    )
    async def test_requires_valid_token(self, api_client, headers, message):
        client = await api_client()

        resp = await client.get("/api/user_preferences", headers=headers)
        assert resp.status == 401
        body = await resp.json()
        assert body["error"]["message"] == message

    async def test_unconfigured(self, api_client):
        client = await api_client(client=None)

        resp = await client.get("/api/user_preferences", headers=AUTH)
        assert resp.status == 500
        body = await resp.json()
        assert body["error"]["code"] == "NOT_CONFIGURED"


class TestBookAppointment:
    PAYLOAD = {
        "property_id": "rent-1",
        "viewing_date": "2026-11-02",
        "viewing_time": "10:30",
        "notes": "Ring twice",
    }

    async def test_books_application_and_viewing(self, api_client, fake_supabase):
        client = await api_client()

        resp = await client.post("/api/appointments/book", headers=AUTH, json=self.PAYLOAD)
        assert resp.status == 201
        body = await resp.json()

        assert body == {"ok": True, "application_id": "applied_properties-1"}

        application = fake_supabase.tables["applied_properties"][0]
        assert application["status"] == "appointment_booked"
        assert application["user_id"] == "user-1"
        assert application["application_data"]["appointment"] == {
            "date": "2026-11-02",
            "time": "10:30",
            "notes": "Ring twice",
            "type": "viewing",
        }

        viewing = fake_supabase.tables["viewings"][0]
        assert viewing["status"] == "pending"
        assert viewing["viewing_time"] == "10:30"

    @pytest.mark.parametrize("missing", ["property_id", "viewing_date", "viewing_time"])
    async def test_missing_fields(self, api_client, missing):
        client = await api_client()
        payload = {k: v for k, v in self.PAYLOAD.items() if k != missing}

        resp = await client.post("/api/appointments/book", headers=AUTH, json=payload)
        assert resp.status == 400
        body = await resp.json()
        assert body["error"]["message"] == "Missing required fields"

    async def test_application_failure(self, api_client, fake_supabase):
        fake_supabase.errors["applied_properties"] = api_error("duplicate key value")
        client = await api_client()

        resp = await client.post("/api/appointments/book", headers=AUTH, json=self.PAYLOAD)
        assert resp.status == 400
        body = await resp.json()
        assert body["error"]["message"] == "duplicate key value"

    async def test_viewing_failure_is_a_warning(self, api_client, fake_supabase):
        fake_supabase.errors["viewings"] = api_error("viewings insert rejected")
        client = await api_client()

        resp = await client.post("/api/appointments/book", headers=AUTH, json=self.PAYLOAD)
        assert resp.status == 201
        body = await resp.json()

        assert body["ok"] is True
        assert body["application_id"] == "applied_properties-1"
        assert body["warning"]["message"] == "viewings insert rejected"

    async def test_requires_token(self, api_client):
        client = await api_client()

        resp = await client.post("/api/appointments/book", json=self.PAYLOAD)
        assert resp.status == 401
