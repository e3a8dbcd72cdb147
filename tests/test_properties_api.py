from tests.conftest import api_error


async def test_rent_page_with_pagination(api_client):
    client = await api_client()

    resp = await client.get("/api/properties", params={"page": "1", "limit": "2", "type": "rent"})
    assert resp.status == 200
    body = await resp.json()

    assert body["error"] is None
    assert [p["id"] for p in body["data"]] == ["rent-1", "rent-2"]
    assert all(p["listing_type"] == "rent" for p in body["data"])
    assert body["pagination"] == {
        "page": 1,
        "limit": 2,
        "total": 3,
        "totalPages": 2,
        "hasNextPage": True,
        "hasPreviousPage": False,
    }


async def test_total_is_invariant_across_pages(api_client):
    client = await api_client()

    pages = []
    for page in ("1", "2", "3"):
        resp = await client.get("/api/properties", params={"page": page, "limit": "2"})
        pages.append(await resp.json())

    assert {p["pagination"]["total"] for p in pages} == {5}
    assert [p["pagination"]["hasNextPage"] for p in pages] == [True, True, False]
    assert [p["pagination"]["hasPreviousPage"] for p in pages] == [False, True, True]
    for p in pages:
        pagination = p["pagination"]
        assert pagination["hasNextPage"] == (pagination["page"] < pagination["totalPages"])

    ids = [item["id"] for p in pages for item in p["data"]]
    assert ids == ["rent-1", "rent-2", "rent-3", "sale-1", "sale-2"]


async def test_hidden_statuses_never_returned(api_client):
    client = await api_client()

    resp = await client.get("/api/properties", params={"limit": "100"})
    body = await resp.json()

    assert "draft-1" not in {p["id"] for p in body["data"]}
    assert {p["status"] for p in body["data"]} <= {"online", "active"}


async def test_limit_is_capped_at_100(api_client):
    client = await api_client()

    resp = await client.get("/api/properties", params={"limit": "1000"})
    body = await resp.json()

    assert body["pagination"]["limit"] == 100


async def test_buy_maps_to_sale(api_client):
    client = await api_client()

    resp = await client.get("/api/properties", params={"type": "buy"})
    body = await resp.json()

    assert [p["id"] for p in body["data"]] == ["sale-1", "sale-2"]
    assert body["pagination"]["total"] == 2


async def test_unparseable_price_is_ignored(api_client):
    client = await api_client()

    resp = await client.get("/api/properties", params={"min_price": "abc", "max_price": "1500"})
    body = await resp.json()

    assert {p["id"] for p in body["data"]} == {"rent-1", "rent-2"}


async def test_identical_requests_are_idempotent(api_client):
    client = await api_client()
    params = {"page": "1", "limit": "3", "city": "lon"}

    first = await (await client.get("/api/properties", params=params)).json()
    second = await (await client.get("/api/properties", params=params)).json()

    assert first["data"] == second["data"]
    assert first["pagination"] == second["pagination"]


async def test_unconfigured_backend(api_client):
    client = await api_client(client=None)

    resp = await client.get("/api/properties")
    assert resp.status == 500
    body = await resp.json()

    assert body["data"] is None
    assert body["pagination"] is None
    assert body["error"]["message"] == "Supabase not configured"
    assert body["error"]["code"] == "NOT_CONFIGURED"


async def test_query_error(api_client, fake_supabase):
    fake_supabase.errors["properties"] = api_error("canceling statement due to timeout")
    client = await api_client()

    resp = await client.get("/api/properties")
    assert resp.status == 500
    body = await resp.json()

    assert body["data"] is None
    assert body["pagination"] is None
    assert body["error"] == {
        "message": "Failed to fetch properties",
        "code": "QUERY_ERROR",
        "details": "canceling statement due to timeout",
    }


async def test_rls_error_is_forbidden(api_client, fake_supabase):
    fake_supabase.errors["properties"] = api_error("permission denied: row-level security")
    client = await api_client()

    resp = await client.get("/api/properties")
    assert resp.status == 403
    body = await resp.json()
    assert body["error"]["code"] == "RLS_ERROR"


async def test_unexpected_error_leaks_no_details(api_client, fake_supabase):
    fake_supabase.errors["properties"] = RuntimeError("socket exploded at 10.0.0.3")
    client = await api_client()

    resp = await client.get("/api/properties")
    assert resp.status == 500
    body = await resp.json()

    assert body["data"] is None
    assert body["error"] == {"message": "Internal server error", "code": "INTERNAL_ERROR"}


async def test_page_past_the_end_is_empty(api_client):
    client = await api_client()

    resp = await client.get("/api/properties", params={"page": "5", "limit": "2"})
    assert resp.status == 200
    body = await resp.json()

    assert body["data"] == []
    assert body["error"] is None
    assert body["pagination"]["total"] == 5
    assert body["pagination"]["totalPages"] == 3
    assert body["pagination"]["hasNextPage"] is False
    assert body["pagination"]["hasPreviousPage"] is True
