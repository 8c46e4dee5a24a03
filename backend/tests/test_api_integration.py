"""Integration tests exercising API endpoints via FastAPI's TestClient."""

from __future__ import annotations

from fastapi.testclient import TestClient

from afusocial.api.deps import get_ai_gateway
from afusocial.main import app
from afusocial.services import AIGatewayError


class FakeGateway:
    """Stand-in for the AI gateway that records what it was asked."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple] = []

    async def generate_response(self, message, history=()):
        self.calls.append(("chat", message, [turn.role.value for turn in history]))
        if self.fail:
            raise AIGatewayError("Failed to generate AI response. Please check your API key and try again.")
        return f"echo: {message}"

    async def improve_post(self, content):
        self.calls.append(("improve", content))
        return content.upper()

    async def generate_content_suggestions(self, topic):
        self.calls.append(("suggest", topic))
        return [f"{topic} idea 1", f"{topic} idea 2"]


def test_health_is_the_only_public_route(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"

    assert client.get("/api/").status_code == 404


def test_api_requires_bearer_token(client: TestClient):
    assert client.get("/api/posts").status_code == 401
    assert client.get("/api/auth/user").status_code == 401

    response = client.get("/api/posts", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_unknown_subject_without_claims_is_rejected(client: TestClient, auth_headers):
    response = client.get("/api/auth/user", headers=auth_headers("nobody"))
    assert response.status_code == 401


def test_first_request_creates_user_from_claims(client: TestClient, auth_headers):
    headers = auth_headers("u-42", email="zoe@example.com", first_name="Zoe", username="zoe")

    response = client.get("/api/auth/user", headers=headers)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["id"] == "u-42"
    assert body["firstName"] == "Zoe"
    assert body["followersCount"] == 0

    response = client.get("/api/users/by-username/zoe", headers=headers)
    assert response.status_code == 200
    assert response.json()["email"] == "zoe@example.com"


def test_feed_posting_liking_and_commenting(client: TestClient, make_user, auth_headers):
    make_user("alice")
    make_user("bob")
    alice, bob = auth_headers("alice"), auth_headers("bob")

    response = client.post("/api/posts", json={"content": "  Hello AfuChat  "}, headers=alice)
    assert response.status_code == 201, response.text
    post = response.json()
    assert post["authorId"] == "alice"
    assert post["content"] == "Hello AfuChat"
    assert post["likesCount"] == 0

    client.post("/api/posts", json={"content": "Second post"}, headers=bob)
    feed = client.get("/api/posts", headers=alice).json()
    assert [p["content"] for p in feed] == ["Second post", "Hello AfuChat"]

    response = client.post(f"/api/posts/{post['id']}/like", headers=bob)
    assert response.status_code == 200
    assert response.json() == {"liked": True, "changed": True, "likesCount": 1}

    response = client.post(f"/api/posts/{post['id']}/like", headers=bob)
    assert response.json() == {"liked": True, "changed": False, "likesCount": 1}

    likes = client.get(f"/api/posts/{post['id']}/likes", headers=alice).json()
    assert [like["userId"] for like in likes] == ["bob"]

    response = client.delete(f"/api/posts/{post['id']}/like", headers=bob)
    assert response.json() == {"liked": False, "changed": True, "likesCount": 0}

    response = client.post(
        f"/api/posts/{post['id']}/comments", json={"content": "Welcome!"}, headers=bob
    )
    assert response.status_code == 201
    assert response.json()["authorId"] == "bob"

    comments = client.get(f"/api/posts/{post['id']}/comments", headers=alice).json()
    assert [c["content"] for c in comments] == ["Welcome!"]
    assert client.get(f"/api/posts/{post['id']}", headers=alice).json()["commentsCount"] == 1

    user_posts = client.get("/api/posts/user/alice", headers=bob).json()
    assert [p["id"] for p in user_posts] == [post["id"]]
    assert client.get("/api/users/alice", headers=bob).json()["postsCount"] == 1


def test_feed_pagination_parameters(client: TestClient, make_user, auth_headers):
    make_user("alice")
    headers = auth_headers("alice")
    ids = [
        client.post("/api/posts", json={"content": f"post {i}"}, headers=headers).json()["id"]
        for i in range(5)
    ]

    page = client.get("/api/posts", params={"limit": 2}, headers=headers).json()
    assert [p["id"] for p in page] == [ids[4], ids[3]]

    page = client.get("/api/posts", params={"limit": 2, "before": ids[3]}, headers=headers).json()
    assert [p["id"] for p in page] == [ids[2], ids[1]]

    assert client.get("/api/posts", params={"limit": 0}, headers=headers).status_code == 422


def test_post_validation_and_ownership(client: TestClient, make_user, auth_headers):
    make_user("alice")
    make_user("bob")
    headers = auth_headers("alice")

    assert client.post("/api/posts", json={"content": "   "}, headers=headers).status_code == 422

    response = client.post(
        "/api/posts", json={"content": "impersonation", "authorId": "bob"}, headers=headers
    )
    assert response.status_code == 403

    assert client.get("/api/posts/999", headers=headers).status_code == 404
    assert client.post("/api/posts/999/like", headers=headers).status_code == 404
    assert (
        client.post("/api/posts/999/comments", json={"content": "x"}, headers=headers).status_code
        == 404
    )


def test_follow_flow(client: TestClient, make_user, auth_headers):
    make_user("alice")
    make_user("bob")
    alice = auth_headers("alice")

    response = client.post("/api/users/bob/follow", headers=alice)
    assert response.status_code == 200
    assert response.json() == {"following": True, "changed": True}
    assert client.post("/api/users/bob/follow", headers=alice).json()["changed"] is False

    assert client.get("/api/users/bob", headers=alice).json()["followersCount"] == 1
    followers = client.get("/api/users/bob/followers", headers=alice).json()
    assert [f["followerId"] for f in followers] == ["alice"]
    following = client.get("/api/users/alice/following", headers=alice).json()
    assert [f["followingId"] for f in following] == ["bob"]

    response = client.delete("/api/users/bob/follow", headers=alice)
    assert response.json() == {"following": False, "changed": True}
    assert client.get("/api/users/alice", headers=alice).json()["followingCount"] == 0

    assert client.post("/api/users/alice/follow", headers=alice).status_code == 400
    assert client.post("/api/users/ghost/follow", headers=alice).status_code == 404
    assert client.get("/api/users/ghost/followers", headers=alice).status_code == 404


def test_search_endpoints(client: TestClient, make_user, auth_headers):
    make_user("alice", username="techalice")
    make_user("bob", username="gardenbob")
    headers = auth_headers("alice")
    client.post("/api/posts", json={"content": "Loving FastAPI"}, headers=headers)

    users = client.get("/api/search/users", params={"q": "tech"}, headers=headers).json()
    assert [u["username"] for u in users] == ["techalice"]

    posts = client.get("/api/search/posts", params={"q": "fastapi"}, headers=headers).json()
    assert [p["content"] for p in posts] == ["Loving FastAPI"]

    assert client.get("/api/search/users", params={"q": ""}, headers=headers).status_code == 422


def test_conversation_access_control(client: TestClient, make_user, auth_headers):
    for name in ("alice", "bob", "carol"):
        make_user(name)
    alice, bob, carol = auth_headers("alice"), auth_headers("bob"), auth_headers("carol")

    response = client.post("/api/conversations", json={"participantIds": ["bob"]}, headers=alice)
    assert response.status_code == 201, response.text
    conversation = response.json()
    assert conversation["isGroup"] is False
    assert conversation["participantIds"] == ["alice", "bob"]
    conversation_id = conversation["id"]

    response = client.post(
        f"/api/conversations/{conversation_id}/messages", json={"content": "Hi Bob"}, headers=alice
    )
    assert response.status_code == 201
    assert response.json()["messageType"] == "text"

    messages = client.get(f"/api/conversations/{conversation_id}/messages", headers=bob).json()
    assert [m["content"] for m in messages] == ["Hi Bob"]

    assert client.get(f"/api/conversations/{conversation_id}/messages", headers=carol).status_code == 403
    assert (
        client.post(
            f"/api/conversations/{conversation_id}/messages", json={"content": "hey"}, headers=carol
        ).status_code
        == 403
    )
    assert client.get("/api/conversations/999/messages", headers=alice).status_code == 404

    listed = client.get("/api/conversations", headers=bob).json()
    assert [c["id"] for c in listed] == [conversation_id]
    assert client.get("/api/conversations", headers=carol).json() == []


def test_conversation_creation_rules(client: TestClient, make_user, auth_headers):
    for name in ("alice", "bob", "carol"):
        make_user(name)
    alice = auth_headers("alice")

    response = client.post(
        "/api/conversations",
        json={"participantIds": ["bob", "carol"], "name": "Book club"},
        headers=alice,
    )
    assert response.status_code == 201
    assert response.json()["isGroup"] is True
    assert response.json()["name"] == "Book club"

    response = client.post("/api/conversations", json={"participantIds": ["alice"]}, headers=alice)
    assert response.status_code == 400

    response = client.post("/api/conversations", json={"participantIds": ["ghost"]}, headers=alice)
    assert response.status_code == 404


def test_ai_endpoints_use_gateway(client: TestClient, make_user, auth_headers):
    make_user("alice")
    headers = auth_headers("alice")
    gateway = FakeGateway()
    app.dependency_overrides[get_ai_gateway] = lambda: gateway

    response = client.post(
        "/api/ai/chat",
        json={
            "message": "How do I write a good post?",
            "conversationHistory": [
                {"role": "user", "content": "Hi"},
                {"role": "assistant", "content": "Hello!"},
            ],
        },
        headers=headers,
    )
    assert response.status_code == 200, response.text
    assert response.json() == {"response": "echo: How do I write a good post?"}
    assert gateway.calls[0] == ("chat", "How do I write a good post?", ["user", "assistant"])

    response = client.post("/api/ai/improve-post", json={"content": "draft"}, headers=headers)
    assert response.json() == {"improvedContent": "DRAFT"}

    response = client.post("/api/ai/content-suggestions", json={"topic": "travel"}, headers=headers)
    assert response.json() == {"suggestions": ["travel idea 1", "travel idea 2"]}

    response = client.post(
        "/api/ai/chat",
        json={"message": "hi", "conversationHistory": [{"role": "system", "content": "x"}]},
        headers=headers,
    )
    assert response.status_code == 422


def test_ai_failure_maps_to_server_error(client: TestClient, make_user, auth_headers):
    make_user("alice")
    app.dependency_overrides[get_ai_gateway] = lambda: FakeGateway(fail=True)

    response = client.post("/api/ai/chat", json={"message": "hi"}, headers=auth_headers("alice"))

    assert response.status_code == 500
    assert "check your API key" in response.json()["detail"]


def test_cors_preflight_allows_configured_origin(client: TestClient):
    response = client.options(
        "/api/posts",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
