"""
Vibe Backend — API Endpoint Tests
==================================

What:  Exercises the HTTP surface end-to-end through ASGITransport.
How:   Real routes, dependencies and exception handlers; each test gets an
       isolated in-memory database via the test_client fixture.

What we test:
    ✅ Root banner and health check
    ✅ Envelope shapes: {"success": true, ...} and {"success": false, "error", "message"}
    ✅ Auth flow: register → verify → login, bearer failures
    ✅ Users, posts, marketplace and video happy paths and key failures
    ✅ camelCase JSON on the wire, no password anywhere in user output
"""

import pytest
from sqlalchemy import text


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestRootAndHealth:
    @pytest.mark.asyncio
    async def test_root_banner(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Vibe Social Network API"
        assert body["status"] == "running"

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.get("/", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_bogus_request_id_replaced(self, test_client):
        response = await test_client.get("/", headers={"X-Request-ID": "bad id with spaces"})
        assert response.headers["X-Request-ID"] != "bad id with spaces"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, test_client):
        response = await test_client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["success"] is False
        assert response.json()["error"] == "not_found"


class TestAuthEndpoints:
    @pytest.mark.asyncio
    async def test_register_verify_login(self, test_client, register):
        user, token = await register(email="Carol@Example.com", username="carol")
        assert user["email"] == "carol@example.com"
        assert user["firstName"].startswith("Member")
        assert "password" not in user and "passwordHash" not in user

        verify = await test_client.get("/api/auth/verify", headers=bearer(token))
        assert verify.status_code == 200
        assert verify.json()["success"] is True
        assert verify.json()["user"]["id"] == user["id"]

        login = await test_client.post(
            "/api/auth/login", json={"email": "carol@example.com", "password": "password123"}
        )
        assert login.status_code == 200
        assert login.json()["success"] is True
        assert login.json()["user"]["id"] == user["id"]

    @pytest.mark.asyncio
    async def test_duplicate_registration(self, test_client, register):
        await register(email="dup@example.com", username="dup")
        response = await test_client.post(
            "/api/auth/register",
            json={
                "email": "dup@example.com",
                "username": "dup2",
                "password": "password123",
                "firstName": "D",
                "lastName": "Up",
            },
        )
        assert response.status_code == 409
        assert response.json()["success"] is False
        assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_register_body_validation(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={"email": "not-an-email", "username": "x", "password": "short"},
        )
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "request_validation_error"
        assert body["details"]

    @pytest.mark.asyncio
    async def test_bad_login(self, test_client, register):
        await register(email="erin@example.com")
        response = await test_client.post(
            "/api/auth/login", json={"email": "erin@example.com", "password": "wrong-password"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_verify_without_token(self, test_client):
        response = await test_client.get("/api/auth/verify")
        assert response.status_code == 401
        assert response.json()["message"] == "Missing token"

    @pytest.mark.asyncio
    async def test_verify_with_garbage_token(self, test_client):
        response = await test_client.get("/api/auth/verify", headers=bearer("garbage"))
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_logout(self, test_client):
        response = await test_client.post("/api/auth/logout")
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Logged out successfully"}


class TestUserEndpoints:
    @pytest.mark.asyncio
    async def test_protected_without_token(self, test_client):
        response = await test_client.get("/api/users/me")
        assert response.status_code == 401
        assert response.json()["error"] == "authentication_error"

    @pytest.mark.asyncio
    async def test_me_and_update(self, test_client, register):
        user, token = await register()

        me = await test_client.get("/api/users/me", headers=bearer(token))
        assert me.json()["user"]["id"] == user["id"]

        updated = await test_client.put(
            "/api/users/me", json={"bio": "Hi there", "location": "Oslo"}, headers=bearer(token)
        )
        assert updated.status_code == 200
        assert updated.json()["message"] == "Profile updated successfully"
        assert updated.json()["user"]["bio"] == "Hi there"
        assert updated.json()["user"]["firstName"] == user["firstName"]

    @pytest.mark.asyncio
    async def test_search_and_lookup(self, test_client, register):
        _, token = await register(firstName="Zelda", username="zeldafan")
        await register(firstName="Link")

        search = await test_client.get("/api/users/search", params={"q": "zel"}, headers=bearer(token))
        assert search.status_code == 200
        assert [u["username"] for u in search.json()["users"]] == ["zeldafan"]
        assert search.json()["total"] == 1

        short = await test_client.get("/api/users/search", params={"q": "z"}, headers=bearer(token))
        assert short.status_code == 400
        assert short.json()["error"] == "validation_error"

        missing = await test_client.get("/api/users/unknown-id", headers=bearer(token))
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_suggestions(self, test_client, register):
        me, token = await register()
        other, _ = await register()
        response = await test_client.get("/api/users/suggestions", headers=bearer(token))
        ids = [u["id"] for u in response.json()["suggestions"]]
        assert other["id"] in ids
        assert me["id"] not in ids


class TestPostEndpoints:
    @pytest.mark.asyncio
    async def test_post_lifecycle(self, test_client, register):
        author, token = await register()
        fan, fan_token = await register()

        created = await test_client.post(
            "/api/posts", json={"content": "First post!"}, headers=bearer(token)
        )
        assert created.status_code == 201
        post = created.json()["post"]
        assert created.json()["message"] == "Post created successfully"
        assert post["author"]["id"] == author["id"]
        assert post["likesCount"] == 0

        like = await test_client.post(f"/api/posts/{post['id']}/like", headers=bearer(fan_token))
        assert like.json()["liked"] is True
        assert like.json()["likesCount"] == 1

        comment = await test_client.post(
            f"/api/posts/{post['id']}/comments", json={"content": "Nice"}, headers=bearer(fan_token)
        )
        assert comment.status_code == 201
        assert comment.json()["comment"]["postId"] == post["id"]

        feed = await test_client.get("/api/posts", params={"page": 1, "limit": 10}, headers=bearer(token))
        assert feed.json()["pagination"] == {"page": 1, "limit": 10, "total": 1, "totalPages": 1}
        entry = feed.json()["posts"][0]
        assert entry["likes"] == [fan["id"]]
        assert entry["commentsCount"] == 1

        forbidden = await test_client.put(
            f"/api/posts/{post['id']}", json={"content": "mine now"}, headers=bearer(fan_token)
        )
        assert forbidden.status_code == 403
        assert forbidden.json()["success"] is False

        deleted = await test_client.delete(f"/api/posts/{post['id']}", headers=bearer(token))
        assert deleted.json()["message"] == "Post deleted successfully"
        gone = await test_client.get(f"/api/posts/{post['id']}", headers=bearer(token))
        assert gone.status_code == 404
        assert gone.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_empty_content_rejected(self, test_client, register):
        _, token = await register()
        response = await test_client.post("/api/posts", json={"content": ""}, headers=bearer(token))
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_limit_out_of_range(self, test_client, register):
        _, token = await register()
        response = await test_client.get("/api/posts", params={"limit": 0}, headers=bearer(token))
        assert response.status_code == 422


class TestTrailingSlash:
    @pytest.mark.asyncio
    async def test_collection_routes_accept_trailing_slash(self, test_client, register):
        _, token = await register()

        created = await test_client.post(
            "/api/posts/", json={"content": "slash"}, headers=bearer(token)
        )
        feed = await test_client.get("/api/posts/", headers=bearer(token))
        listing = await test_client.post(
            "/api/marketplace/",
            json={
                "title": "Kettle",
                "description": "Barely used",
                "price": 12.5,
                "category": "home",
                "condition": "good",
            },
            headers=bearer(token),
        )
        browse = await test_client.get("/api/marketplace/")

        assert created.status_code == 201
        assert feed.status_code == 200
        assert feed.json()["pagination"]["total"] == 1
        assert listing.status_code == 201
        assert browse.json()["pagination"]["total"] == 1


class TestDatabaseFailures:
    @pytest.mark.asyncio
    async def test_sql_error_becomes_server_error_envelope(self, test_client, register, db_engine):
        _, token = await register()
        async with db_engine.begin() as conn:
            await conn.execute(text("DROP TABLE posts"))

        response = await test_client.get("/api/posts", headers=bearer(token))

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "server_error"
        assert "posts" not in body["message"]
        assert "details" not in body


class TestMarketplaceEndpoints:
    @pytest.mark.asyncio
    async def test_listing_flow(self, test_client, register):
        seller, token = await register()
        _, buyer_token = await register()
        body = {
            "title": "Guitar",
            "description": "Acoustic, barely used",
            "price": 180,
            "category": "music",
            "condition": "like-new",
            "tags": ["instrument"],
        }

        anonymous = await test_client.post("/api/marketplace", json=body)
        assert anonymous.status_code == 401

        created = await test_client.post("/api/marketplace", json=body, headers=bearer(token))
        assert created.status_code == 201
        product = created.json()["product"]
        assert product["currency"] == "EUR"
        assert product["status"] == "available"
        assert product["seller"]["id"] == seller["id"]

        browse = await test_client.get(
            "/api/marketplace",
            params={"search": "INSTRUMENT", "minPrice": 100, "maxPrice": 200, "sortBy": "price"},
        )
        assert browse.status_code == 200
        assert [p["id"] for p in browse.json()["products"]] == [product["id"]]

        bad_sort = await test_client.get("/api/marketplace", params={"sortBy": "sellerId"})
        assert bad_sort.status_code == 422

        categories = await test_client.get("/api/marketplace/categories")
        assert categories.json()["categories"] == ["music"]

        not_yours = await test_client.post(
            f"/api/marketplace/{product['id']}/mark-sold", headers=bearer(buyer_token)
        )
        assert not_yours.status_code == 403

        sold = await test_client.post(f"/api/marketplace/{product['id']}/mark-sold", headers=bearer(token))
        assert sold.json()["product"]["status"] == "sold"
        assert sold.json()["message"] == "Product marked as sold"

        seller_list = await test_client.get(f"/api/marketplace/seller/{seller['id']}")
        assert seller_list.json()["count"] == 1

        available = await test_client.get("/api/marketplace")
        assert available.json()["products"] == []

    @pytest.mark.asyncio
    async def test_inverted_price_range(self, test_client):
        response = await test_client.get("/api/marketplace", params={"minPrice": 50, "maxPrice": 10})
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "minPrice"

    @pytest.mark.asyncio
    async def test_missing_product(self, test_client):
        response = await test_client.get("/api/marketplace/does-not-exist")
        assert response.status_code == 404


class TestVideoEndpoints:
    @pytest.mark.asyncio
    async def test_room_flow(self, test_client, register):
        host, host_token = await register()
        guest, guest_token = await register()

        created = await test_client.post(
            "/api/video/rooms",
            json={"name": "Book club", "isPrivate": False, "maxParticipants": 3, "password": "read"},
            headers=bearer(host_token),
        )
        assert created.status_code == 201
        room = created.json()["room"]
        assert room["status"] == "waiting"
        assert room["password"] == "read"

        listed = await test_client.get("/api/video/rooms", headers=bearer(guest_token))
        assert listed.json()["count"] == 1
        assert listed.json()["rooms"][0]["password"] is None

        wrong = await test_client.post(
            f"/api/video/rooms/{room['id']}/join", json={"password": "nope"}, headers=bearer(guest_token)
        )
        assert wrong.status_code == 403

        joined = await test_client.post(
            f"/api/video/rooms/{room['id']}/join", json={"password": "read"}, headers=bearer(guest_token)
        )
        assert joined.status_code == 200
        assert joined.json()["room"]["status"] == "active"
        assert joined.json()["room"]["participantCount"] == 2

        left = await test_client.post(f"/api/video/rooms/{room['id']}/leave", headers=bearer(host_token))
        assert left.json()["message"] == "You left the room"

        detail = await test_client.get(f"/api/video/rooms/{room['id']}", headers=bearer(guest_token))
        assert detail.json()["room"]["host"]["id"] == guest["id"]
        assert detail.json()["room"]["password"] == "read"

        ended = await test_client.post(f"/api/video/rooms/{room['id']}/end", headers=bearer(guest_token))
        assert ended.json()["room"]["status"] == "ended"

        history = await test_client.get("/api/video/history", headers=bearer(guest_token))
        assert history.json()["pagination"]["total"] == 1

        host_history = await test_client.get("/api/video/history", headers=bearer(host_token))
        assert host_history.json()["pagination"]["total"] == 0
        assert host["id"] not in [p["id"] for p in detail.json()["room"]["participants"]]

    @pytest.mark.asyncio
    async def test_join_without_body(self, test_client, register):
        _, host_token = await register()
        _, guest_token = await register()
        _, late_token = await register()
        created = await test_client.post(
            "/api/video/rooms",
            json={"name": "Open", "isPrivate": False, "maxParticipants": 2},
            headers=bearer(host_token),
        )
        room_id = created.json()["room"]["id"]

        joined = await test_client.post(f"/api/video/rooms/{room_id}/join", headers=bearer(guest_token))
        assert joined.status_code == 200

        full = await test_client.post(f"/api/video/rooms/{room_id}/join", headers=bearer(late_token))
        assert full.status_code == 409
