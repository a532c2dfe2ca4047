import pytest

from app.core.exceptions import NotFoundOrDenied, ValidationFailed
from app.models import Comment, Post, User
from app.services.comment_service import CommentService
from app.utils.pagination import PageRequest


@pytest.fixture
def author(db_session):
    user = User(username="writer", email="writer@x.com", password="x", full_name="Writer")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def reader(db_session):
    user = User(username="reader", email="reader@x.com", password="x")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def post(db_session, author):
    post = Post(author_id=author.id, title="Post", content="Body", status="published")
    db_session.add(post)
    db_session.commit()
    return post


def test_create_and_list(db_session, author, reader, post):
    top = CommentService.create_comment(db_session, reader.id, post.id, "hello")
    CommentService.create_comment(db_session, author.id, post.id, "thanks", parent_id=top.id)

    comments, meta = CommentService.list_post_comments(db_session, post.id, PageRequest(1, 20))
    assert [c.id for c in comments] == [top.id]
    assert comments[0].replies_count == 1
    assert comments[0].username == "reader"
    assert meta.total_pages == 1


def test_create_rejects_blank_content(db_session, reader, post):
    with pytest.raises(ValidationFailed) as exc_info:
        CommentService.create_comment(db_session, reader.id, post.id, "  ")
    assert exc_info.value.errors[0]["field"] == "content"
    assert db_session.query(Comment).count() == 0


def test_create_on_draft(db_session, author, reader):
    draft = Post(author_id=author.id, title="Draft", content="Body", status="draft")
    db_session.add(draft)
    db_session.commit()

    with pytest.raises(NotFoundOrDenied):
        CommentService.create_comment(db_session, reader.id, draft.id, "hello")


def test_update_only_by_author(db_session, author, reader, post):
    comment = CommentService.create_comment(db_session, reader.id, post.id, "hello")

    with pytest.raises(NotFoundOrDenied):
        CommentService.update_comment(db_session, author.id, comment.id, "changed")

    updated = CommentService.update_comment(db_session, reader.id, comment.id, "changed")
    assert updated.content == "changed"


def test_admin_role_does_not_grant_edit(db_session, reader, post):
    admin = User(username="root", email="root@x.com", password="x", role="admin")
    db_session.add(admin)
    db_session.commit()
    comment = CommentService.create_comment(db_session, reader.id, post.id, "hello")

    with pytest.raises(NotFoundOrDenied):
        CommentService.update_comment(db_session, admin.id, comment.id, "changed")


def test_delete_counts_replies(db_session, author, reader, post):
    top = CommentService.create_comment(db_session, reader.id, post.id, "hello")
    CommentService.create_comment(db_session, author.id, post.id, "a", parent_id=top.id)
    CommentService.create_comment(db_session, reader.id, post.id, "b", parent_id=top.id)
    survivor = CommentService.create_comment(db_session, author.id, post.id, "other")

    removed = CommentService.delete_comment(db_session, reader.id, "user", top.id)

    assert removed == 3
    assert [c.id for c in db_session.query(Comment).all()] == [survivor.id]


def test_delete_by_admin_role(db_session, author, reader, post):
    comment = CommentService.create_comment(db_session, reader.id, post.id, "hello")
    assert CommentService.delete_comment(db_session, author.id, "admin", comment.id) == 1


def test_delete_denied_for_stranger(db_session, author, reader, post):
    comment = CommentService.create_comment(db_session, reader.id, post.id, "hello")
    with pytest.raises(NotFoundOrDenied):
        CommentService.delete_comment(db_session, author.id, "user", comment.id)
    assert db_session.query(Comment).count() == 1


def test_post_delete_cascades_to_comments(db_session, reader, post):
    top = CommentService.create_comment(db_session, reader.id, post.id, "hello")
    CommentService.create_comment(db_session, reader.id, post.id, "again", parent_id=top.id)

    db_session.delete(post)
    db_session.commit()
    assert db_session.query(Comment).count() == 0


def test_search_comments_includes_replies(db_session, author, reader, post):
    top = CommentService.create_comment(db_session, reader.id, post.id, "hello there")
    CommentService.create_comment(db_session, author.id, post.id, "hello back", parent_id=top.id)
    CommentService.create_comment(db_session, author.id, post.id, "unrelated")

    comments, _ = CommentService.search_comments(db_session, PageRequest(1, 20), "hello")
    assert len(comments) == 2
    assert all(c.post_title == "Post" for c in comments)


def test_delete_leaves_other_threads(db_session, author, reader, post):
    first = CommentService.create_comment(db_session, reader.id, post.id, "first")
    CommentService.create_comment(db_session, author.id, post.id, "a", parent_id=first.id)
    second = CommentService.create_comment(db_session, reader.id, post.id, "second")
    kept = CommentService.create_comment(db_session, author.id, post.id, "b", parent_id=second.id)

    assert CommentService.remove_with_replies(db_session, first.id) == 2
    remaining = {c.id for c in db_session.query(Comment).all()}
    assert remaining == {second.id, kept.id}


def test_parent_zero_creates_top_level(db_session, reader, post):
    comment = CommentService.create_comment(db_session, reader.id, post.id, "hello", parent_id=0)
    assert comment.parent_id is None
