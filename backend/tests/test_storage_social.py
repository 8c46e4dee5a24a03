"""Unit tests for users, follows and search in the storage layer."""

from __future__ import annotations

import pytest

from afusocial.models import Comment, Follow, Like, Post
from afusocial.schemas import UserUpsert
from afusocial.services import InvalidOperationError, NotFoundError


def test_upsert_user_creates_then_updates_supplied_fields(storage):
    created = storage.upsert_user(
        UserUpsert(id="u-1", email="ada@example.com", first_name="Ada", username="ada")
    )
    assert created.first_name == "Ada"
    assert created.followers_count == 0

    updated = storage.upsert_user(UserUpsert(id="u-1", last_name="Lovelace"))

    assert updated.id == "u-1"
    assert updated.first_name == "Ada"
    assert updated.last_name == "Lovelace"
    assert updated.email == "ada@example.com"
    assert storage.get_user_by_username("ada").id == "u-1"


def test_get_user_returns_none_for_unknown_id(storage):
    assert storage.get_user("missing") is None
    assert storage.get_user_by_username("missing") is None


def test_follow_and_unfollow_keep_counters_in_step(storage, make_user):
    make_user("alice")
    make_user("bob")

    assert storage.follow_user("alice", "bob") is True
    assert storage.get_user("alice").following_count == 1
    assert storage.get_user("bob").followers_count == 1
    assert [f.follower_id for f in storage.get_user_followers("bob")] == ["alice"]
    assert [f.following_id for f in storage.get_user_following("alice")] == ["bob"]

    assert storage.unfollow_user("alice", "bob") is True
    assert storage.get_user("alice").following_count == 0
    assert storage.get_user("bob").followers_count == 0


def test_repeated_follow_is_a_no_op(storage, make_user, db_session):
    make_user("alice")
    make_user("bob")

    storage.follow_user("alice", "bob")
    assert storage.follow_user("alice", "bob") is False

    assert db_session.query(Follow).count() == 1
    assert storage.get_user("bob").followers_count == 1


def test_unfollow_when_not_following_changes_nothing(storage, make_user):
    make_user("alice")
    make_user("bob")

    assert storage.unfollow_user("alice", "bob") is False
    assert storage.get_user("alice").following_count == 0
    assert storage.get_user("bob").followers_count == 0


def test_self_follow_is_rejected(storage, make_user):
    make_user("alice")

    with pytest.raises(InvalidOperationError):
        storage.follow_user("alice", "alice")
    assert storage.get_user("alice").following_count == 0


def test_follow_unknown_user_raises_not_found(storage, make_user):
    make_user("alice")

    with pytest.raises(NotFoundError):
        storage.follow_user("alice", "ghost")


def test_search_users_is_case_insensitive_and_capped(storage, make_user):
    for i in range(25):
        make_user(f"user-{i:02d}", username=f"tech{i:02d}")
    make_user("other", username="gardener")

    results = storage.search_users("TECH")

    assert len(results) == 20
    assert [u.username for u in results] == [f"tech{i:02d}" for i in range(20)]


def test_search_users_matches_first_and_last_name(storage, make_user):
    make_user("u-1", username="grace", first_name="Grace", last_name="Hopper")
    make_user("u-2", username="linus")

    assert [u.id for u in storage.search_users("hopp")] == ["u-1"]


def test_search_blank_query_returns_nothing(storage, make_user):
    make_user("alice")
    storage.create_post(author_id="alice", content="anything")

    assert storage.search_users("   ") == []
    assert storage.search_posts("") == []


def test_search_posts_treats_wildcards_literally(storage, make_user):
    make_user("alice")
    storage.create_post(author_id="alice", content="plain text")
    literal = storage.create_post(author_id="alice", content="100% sure")

    assert [p.id for p in storage.search_posts("%")] == [literal.id]
    assert storage.search_posts("_") == []


def test_search_posts_newest_first(storage, make_user):
    make_user("alice")
    older = storage.create_post(author_id="alice", content="Python tips")
    newer = storage.create_post(author_id="alice", content="more python")

    assert [p.id for p in storage.search_posts("PYTHON")] == [newer.id, older.id]


def test_delete_user_cascades_and_fixes_other_counters(storage, make_user, db_session):
    make_user("alice")
    make_user("bob")
    make_user("carol")
    carol_post = storage.create_post(author_id="carol", content="carol's post")
    storage.create_post(author_id="bob", content="bob's post")
    storage.like_post("bob", carol_post.id)
    storage.like_post("alice", carol_post.id)
    storage.create_comment(author_id="bob", post_id=carol_post.id, content="nice")
    storage.follow_user("bob", "alice")
    storage.follow_user("carol", "bob")

    assert storage.delete_user("bob") is True
    db_session.expire_all()

    assert storage.get_user("bob") is None
    assert db_session.query(Post).filter(Post.author_id == "bob").count() == 0
    assert db_session.query(Like).filter(Like.user_id == "bob").count() == 0
    assert db_session.query(Comment).filter(Comment.author_id == "bob").count() == 0
    assert db_session.query(Follow).count() == 0

    post = storage.get_post(carol_post.id)
    assert post.likes_count == 1
    assert post.comments_count == 0
    assert storage.get_user("alice").followers_count == 0
    assert storage.get_user("carol").following_count == 0


def test_delete_unknown_user_returns_false(storage):
    assert storage.delete_user("ghost") is False
    assert storage.get_user("ghost") is None

