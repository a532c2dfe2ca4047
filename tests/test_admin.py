from datetime import datetime

from app.models import Post, User
from app.services.admin_service import AdminService, _months_ago
from tests.conftest import add_comment, auth_headers, create_post


def test_admin_routes_require_admin(client, alice):
    token, _ = alice
    assert client.get("/api/admin/dashboard").status_code == 401

    response = client.get("/api/admin/dashboard", headers=auth_headers(token))
    assert response.status_code == 403
    assert response.json()["message"] == "Access denied. Admin only."


def test_dashboard(client, alice, bob, admin_token):
    alice_token, _ = alice
    bob_token, _ = bob
    post_id = create_post(client, alice_token)
    create_post(client, alice_token, status="draft")
    add_comment(client, bob_token, post_id)
    client.post(f"/api/posts/{post_id}/like", headers=auth_headers(bob_token))
    client.get(f"/api/posts/{post_id}")

    body = client.get("/api/admin/dashboard", headers=auth_headers(admin_token)).json()
    assert body["stats"] == {
        "totalUsers": 3,
        "totalPosts": 2,
        "publishedPosts": 1,
        "draftPosts": 1,
        "totalComments": 1,
        "totalViews": 1,
        "totalLikes": 1,
    }
    assert len(body["recentPosts"]) == 2
    assert body["recentUsers"][0]["username"] == "bob"


def test_list_users_with_search(client, alice, bob, admin_token):
    alice_token, _ = alice
    create_post(client, alice_token)

    body = client.get("/api/admin/users?search=alice", headers=auth_headers(admin_token)).json()
    assert [u["username"] for u in body["users"]] == ["alice"]
    assert body["users"][0]["posts_count"] == 1
    assert body["pagination"]["total"] == 1


def test_update_role(client, alice, admin_token):
    token, user_id = alice
    response = client.put(
        f"/api/admin/users/{user_id}/role",
        json={"role": "admin"},
        headers=auth_headers(admin_token),
    )
    assert response.status_code == 200
    assert client.get("/api/admin/dashboard", headers=auth_headers(token)).status_code == 200


def test_invalid_role(client, alice, admin_token):
    _, user_id = alice
    response = client.put(
        f"/api/admin/users/{user_id}/role",
        json={"role": "owner"},
        headers=auth_headers(admin_token),
    )
    assert response.status_code == 400


def test_admin_cannot_demote_or_delete_self(client, admin_token):
    me = client.get("/api/auth/me", headers=auth_headers(admin_token)).json()["user"]

    response = client.put(
        f"/api/admin/users/{me['id']}/role",
        json={"role": "user"},
        headers=auth_headers(admin_token),
    )
    assert response.status_code == 400

    response = client.delete(f"/api/admin/users/{me['id']}", headers=auth_headers(admin_token))
    assert response.status_code == 400


def test_delete_user_cascades(client, alice, bob, admin_token):
    alice_token, alice_id = alice
    bob_token, _ = bob
    post_id = create_post(client, alice_token)
    add_comment(client, bob_token, post_id)

    response = client.delete(f"/api/admin/users/{alice_id}", headers=auth_headers(admin_token))
    assert response.status_code == 200

    assert client.get("/api/users/alice").status_code == 404
    assert client.get(f"/api/posts/{post_id}").status_code == 404
    stats = client.get("/api/admin/dashboard", headers=auth_headers(admin_token)).json()["stats"]
    assert stats["totalComments"] == 0
    assert stats["totalPosts"] == 0


def test_delete_unknown_user(client, admin_token):
    response = client.delete("/api/admin/users/999", headers=auth_headers(admin_token))
    assert response.status_code == 404


def test_post_moderation(client, alice, admin_token):
    token, _ = alice
    published = create_post(client, token, title="Visible")
    draft = create_post(client, token, title="Hidden", status="draft")

    body = client.get("/api/admin/posts?status=draft", headers=auth_headers(admin_token)).json()
    assert [p["id"] for p in body["posts"]] == [draft]

    response = client.put(
        f"/api/admin/posts/{draft}/status",
        json={"status": "published"},
        headers=auth_headers(admin_token),
    )
    assert response.status_code == 200
    assert client.get(f"/api/posts/{draft}").status_code == 200

    response = client.delete(f"/api/admin/posts/{published}", headers=auth_headers(admin_token))
    assert response.status_code == 200
    assert client.get(f"/api/posts/{published}").status_code == 404


def test_comment_moderation(client, alice, admin_token):
    token, _ = alice
    post_id = create_post(client, token, title="Thread")
    top = add_comment(client, token, post_id, "top")
    add_comment(client, token, post_id, "reply", parent_id=top["id"])

    body = client.get("/api/admin/comments", headers=auth_headers(admin_token)).json()
    assert len(body["comments"]) == 2
    assert {c["post_title"] for c in body["comments"]} == {"Thread"}

    response = client.delete(f"/api/admin/comments/{top['id']}", headers=auth_headers(admin_token))
    assert response.status_code == 200
    assert client.get("/api/admin/comments", headers=auth_headers(admin_token)).json()["comments"] == []


def test_analytics_endpoint(client, alice, admin_token):
    token, _ = alice
    post_id = create_post(client, token, title="Hot")
    client.get(f"/api/posts/{post_id}")

    body = client.get("/api/admin/analytics", headers=auth_headers(admin_token)).json()
    assert sum(item["count"] for item in body["postsByMonth"]) == 1
    assert sum(item["count"] for item in body["usersByMonth"]) == 2
    assert body["topPostsByViews"][0] == {"title": "Hot", "views": 1, "likes": 0, "username": "alice"}
    assert body["topPostsByLikes"][0]["title"] == "Hot"


def test_analytics_window_excludes_old_rows(db_session):
    user = User(username="u", email="u@x.com", password="x", created_at=datetime(2020, 1, 15))
    db_session.add(user)
    db_session.commit()
    db_session.add_all([
        Post(author_id=user.id, title="old", content="c", status="published",
             created_at=datetime(2020, 2, 1)),
        Post(author_id=user.id, title="new", content="c", status="published",
             created_at=datetime(2026, 9, 3)),
    ])
    db_session.commit()

    result = AdminService.analytics(db_session, now=datetime(2026, 10, 16))
    assert result["postsByMonth"] == [{"month": "2026-09", "count": 1}]
    assert result["usersByMonth"] == []


def test_months_ago_clamps_day():
    assert _months_ago(datetime(2026, 3, 31), 1) == datetime(2026, 2, 28)
    assert _months_ago(datetime(2026, 10, 16), 12) == datetime(2025, 10, 16)
