"""Tests for User cache keys."""

from flag_cache import LOGGED_OUT_USER_KEY, User


def test_cache_key_is_user_id():
    assert User(user_id="alice").cache_key == "alice"


def test_logged_out_uses_sentinel():
    assert User().cache_key == LOGGED_OUT_USER_KEY


def test_empty_id_is_not_logged_out():
    assert User(user_id="").cache_key == ""
    assert User(user_id="").cache_key != User().cache_key


def test_custom_ignored_for_equality():
    assert User(user_id="a", custom={"tier": 1}) == User(user_id="a")
