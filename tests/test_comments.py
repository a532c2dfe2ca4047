"""
Comment endpoints: threading, ownership and cascading deletes
"""
from tests.conftest import add_comment, auth_headers, create_post


def test_comment_and_reply_scenario(client, alice):
    token, _ = alice
    post_id = create_post(client, token)

    top = add_comment(client, token, post_id, "hello")
    reply = add_comment(client, token, post_id, "hi back", parent_id=top["id"])

    response = client.get(f"/api/comments/post/{post_id}")
    assert response.status_code == 200
    body = response.json()
    assert len(body["comments"]) == 1
    assert body["comments"][0]["id"] == top["id"]
    assert body["comments"][0]["replies_count"] == 1
    assert body["comments"][0]["username"] == "alice"
    assert body["pagination"] == {"current": 1, "total": 1, "hasNext": False, "hasPrev": False}

    response = client.get(f"/api/comments/comment/{top['id']}/replies")
    assert response.status_code == 200
    replies = response.json()["replies"]
    assert [r["id"] for r in replies] == [reply["id"]]
    assert replies[0]["parent_id"] == top["id"]


def test_created_comment_carries_author_fields(client, alice):
    token, user_id = alice
    post_id = create_post(client, token)

    comment = add_comment(client, token, post_id, "first")
    assert comment["content"] == "first"
    assert comment["post_id"] == post_id
    assert comment["user_id"] == user_id
    assert comment["parent_id"] is None
    assert comment["full_name"] == "Alice"


def test_top_level_comments_newest_first(client, alice):
    token, _ = alice
    post_id = create_post(client, token)
    ids = [add_comment(client, token, post_id, f"c{i}")["id"] for i in range(3)]

    body = client.get(f"/api/comments/post/{post_id}").json()
    assert [c["id"] for c in body["comments"]] == list(reversed(ids))


def test_replies_oldest_first(client, alice, bob):
    alice_token, _ = alice
    bob_token, _ = bob
    post_id = create_post(client, alice_token)
    top = add_comment(client, alice_token, post_id)

    first = add_comment(client, bob_token, post_id, "one", parent_id=top["id"])
    second = add_comment(client, alice_token, post_id, "two", parent_id=top["id"])

    replies = client.get(f"/api/comments/comment/{top['id']}/replies").json()["replies"]
    assert [r["id"] for r in replies] == [first["id"], second["id"]]


def test_comment_listing_paginates(client, alice):
    token, _ = alice
    post_id = create_post(client, token)
    for i in range(5):
        add_comment(client, token, post_id, f"c{i}")

    body = client.get(f"/api/comments/post/{post_id}?page=2&limit=2").json()
    assert len(body["comments"]) == 2
    assert body["pagination"] == {"current": 2, "total": 3, "hasNext": True, "hasPrev": True}


def test_comments_of_unknown_post_is_empty(client):
    body = client.get("/api/comments/post/999").json()
    assert body["comments"] == []
    assert body["pagination"]["total"] == 0


def test_unauthenticated_comment_rejected(client, alice):
    token, _ = alice
    post_id = create_post(client, token)

    response = client.post("/api/comments", json={"content": "hello", "post_id": post_id})
    assert response.status_code == 401
    assert client.get(f"/api/comments/post/{post_id}").json()["comments"] == []


def test_invalid_token_rejected(client, alice):
    token, _ = alice
    post_id = create_post(client, token)

    response = client.post(
        "/api/comments",
        json={"content": "hello", "post_id": post_id},
        headers=auth_headers("not-a-token"),
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Token is not valid"


def test_empty_content_rejected(client, alice):
    token, _ = alice
    post_id = create_post(client, token)

    for content in ("", "   "):
        response = client.post(
            "/api/comments",
            json={"content": content, "post_id": post_id},
            headers=auth_headers(token),
        )
        assert response.status_code == 400
        assert response.json()["errors"]


def test_comment_on_draft_is_not_found(client, alice):
    token, _ = alice
    post_id = create_post(client, token, status="draft")

    response = client.post(
        "/api/comments",
        json={"content": "hello", "post_id": post_id},
        headers=auth_headers(token),
    )
    assert response.status_code == 404


def test_comment_on_missing_post_is_not_found(client, alice):
    token, _ = alice
    response = client.post(
        "/api/comments",
        json={"content": "hello", "post_id": 12345},
        headers=auth_headers(token),
    )
    assert response.status_code == 404


def test_parent_from_another_post_is_not_found(client, alice):
    token, _ = alice
    first_post = create_post(client, token, title="First")
    second_post = create_post(client, token, title="Second")
    foreign = add_comment(client, token, first_post)

    response = client.post(
        "/api/comments",
        json={"content": "hello", "post_id": second_post, "parent_id": foreign["id"]},
        headers=auth_headers(token),
    )
    assert response.status_code == 404


def test_author_can_edit(client, alice):
    token, _ = alice
    post_id = create_post(client, token)
    comment = add_comment(client, token, post_id, "before")

    response = client.put(
        f"/api/comments/{comment['id']}",
        json={"content": "after"},
        headers=auth_headers(token),
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Comment updated successfully"

    listed = client.get(f"/api/comments/post/{post_id}").json()["comments"]
    assert listed[0]["content"] == "after"


def test_non_author_cannot_edit(client, alice, bob, admin_token):
    alice_token, _ = alice
    bob_token, _ = bob
    post_id = create_post(client, alice_token)
    comment = add_comment(client, alice_token, post_id, "mine")

    for token in (bob_token, admin_token):
        response = client.put(
            f"/api/comments/{comment['id']}",
            json={"content": "hijacked"},
            headers=auth_headers(token),
        )
        assert response.status_code == 404

    listed = client.get(f"/api/comments/post/{post_id}").json()["comments"]
    assert listed[0]["content"] == "mine"


def test_delete_removes_replies(client, alice, bob):
    alice_token, _ = alice
    bob_token, _ = bob
    post_id = create_post(client, alice_token)
    top = add_comment(client, alice_token, post_id)
    add_comment(client, bob_token, post_id, "reply", parent_id=top["id"])
    other = add_comment(client, bob_token, post_id, "unrelated")

    response = client.delete(f"/api/comments/{top['id']}", headers=auth_headers(alice_token))
    assert response.status_code == 200
    assert response.json()["message"] == "Comment deleted successfully"

    listed = client.get(f"/api/comments/post/{post_id}").json()["comments"]
    assert [c["id"] for c in listed] == [other["id"]]
    assert client.get(f"/api/comments/comment/{top['id']}/replies").json()["replies"] == []


def test_non_author_cannot_delete(client, alice, bob):
    alice_token, _ = alice
    bob_token, _ = bob
    post_id = create_post(client, alice_token)
    comment = add_comment(client, alice_token, post_id)

    response = client.delete(f"/api/comments/{comment['id']}", headers=auth_headers(bob_token))
    assert response.status_code == 404
    assert len(client.get(f"/api/comments/post/{post_id}").json()["comments"]) == 1


def test_admin_can_delete_any_comment(client, alice, admin_token):
    token, _ = alice
    post_id = create_post(client, token)
    comment = add_comment(client, token, post_id)

    response = client.delete(f"/api/comments/{comment['id']}", headers=auth_headers(admin_token))
    assert response.status_code == 200
    assert client.get(f"/api/comments/post/{post_id}").json()["comments"] == []


def test_delete_missing_comment(client, alice):
    token, _ = alice
    response = client.delete("/api/comments/4242", headers=auth_headers(token))
    assert response.status_code == 404


def test_user_comments_include_post_title(client, alice):
    token, user_id = alice
    post_id = create_post(client, token, title="Threaded talk")
    top = add_comment(client, token, post_id, "top")
    add_comment(client, token, post_id, "reply", parent_id=top["id"])

    body = client.get(f"/api/comments/user/{user_id}").json()
    assert [c["id"] for c in body["comments"]] == [top["id"]]
    assert body["comments"][0]["post_title"] == "Threaded talk"


def test_reply_to_reply_is_kept_out_of_listings(client, alice):
    token, _ = alice
    post_id = create_post(client, token)
    top = add_comment(client, token, post_id, "top")
    reply = add_comment(client, token, post_id, "reply", parent_id=top["id"])
    nested = add_comment(client, token, post_id, "nested", parent_id=reply["id"])

    listed = client.get(f"/api/comments/post/{post_id}").json()["comments"]
    assert [c["id"] for c in listed] == [top["id"]]
    assert listed[0]["replies_count"] == 1

    top_replies = client.get(f"/api/comments/comment/{top['id']}/replies").json()["replies"]
    assert [r["id"] for r in top_replies] == [reply["id"]]

    nested_replies = client.get(f"/api/comments/comment/{reply['id']}/replies").json()["replies"]
    assert [r["id"] for r in nested_replies] == [nested["id"]]


def test_post_comment_count_includes_replies(client, alice):
    token, _ = alice
    post_id = create_post(client, token)
    top = add_comment(client, token, post_id)
    add_comment(client, token, post_id, "reply", parent_id=top["id"])

    post = client.get(f"/api/posts/{post_id}").json()["post"]
    assert post["comment_count"] == 2



def test_negative_page_or_limit_reads_empty(client, alice):
    token, _ = alice
    post_id = create_post(client, token)
    for i in range(3):
        add_comment(client, token, post_id, f"c{i}")

    body = client.get(f"/api/comments/post/{post_id}?page=-1&limit=2").json()
    assert body["comments"] == []
    assert body["pagination"] == {"current": -1, "total": 2, "hasNext": True, "hasPrev": False}

    body = client.get(f"/api/comments/post/{post_id}?limit=-2").json()
    assert body["comments"] == []
    assert body["pagination"]["current"] == 1


def test_parent_id_zero_is_top_level(client, alice):
    token, _ = alice
    post_id = create_post(client, token)

    comment = add_comment(client, token, post_id, "top", parent_id=0)
    assert comment["parent_id"] is None

    listed = client.get(f"/api/comments/post/{post_id}").json()["comments"]
    assert [c["id"] for c in listed] == [comment["id"]]


def test_denied_requests_are_not_logged_as_store_errors(client, alice, bob, caplog):
    alice_token, _ = alice
    bob_token, _ = bob
    post_id = create_post(client, alice_token)
    comment = add_comment(client, alice_token, post_id)

    with caplog.at_level("ERROR", logger="app.core.database"):
        response = client.delete(f"/api/comments/{comment['id']}", headers=auth_headers(bob_token))

    assert response.status_code == 404
    assert not [r for r in caplog.records if r.name == "app.core.database"]
