"""Tests for source <-> instance mapping."""

from __future__ import annotations

import pytest

from esodm.declarations import embedded, field, index
from esodm.mapper import dump, reconstruct


@pytest.fixture
def models(store):
    @embedded(store=store)
    class Tag:
        label = field("keyword")

    @embedded(store=store)
    class Address:
        city = field("keyword")
        tags = field(nested=Tag)

    @index(store=store)
    class User:
        name = field("text")
        values = field("integer")
        address = field(object=Address)
        history = field(nested=Address)

        def __init__(self, name, values):
            raise AssertionError("reconstruct must not call __init__")

    return User, Address, Tag


def test_reconstruct_none(models, store):
    User, _, _ = models
    assert reconstruct(User, None, store) is None


def test_reconstruct_partial_leaves_fields_unset(models, store):
    User, _, _ = models
    user = reconstruct(User, {"name": "Bob"}, store)

    assert isinstance(user, User)
    assert user.name == "Bob"
    assert not hasattr(user, "values")
    assert "values" not in vars(user)


def test_reconstruct_drops_undeclared_keys(models, store):
    User, _, _ = models
    user = reconstruct(User, {"name": "Bob", "password": "secret"}, store)
    assert not hasattr(user, "password")


def test_reconstruct_keeps_falsy_and_null_values(models, store):
    User, _, _ = models
    user = reconstruct(User, {"values": 0, "address": None}, store)
    assert user.values == 0
    assert user.address is None


def test_reconstruct_list_source(models, store):
    User, _, _ = models
    users = reconstruct(User, [{"name": "Bob"}, {"name": "Tom"}, {}], store)

    assert len(users) == 3
    assert all(isinstance(u, User) for u in users)
    assert [getattr(u, "name", None) for u in users] == ["Bob", "Tom", None]


def test_reconstruct_object_and_nested(models, store):
    User, Address, Tag = models
    user = reconstruct(
        User,
        {
            "name": "Bob",
            "address": {"city": "Seoul", "tags": [{"label": "home"}, {"label": "main"}]},
            "history": [{"city": "Busan"}, {"city": "Daegu", "zip": "000"}],
        },
        store,
    )

    assert isinstance(user.address, Address)
    assert user.address.city == "Seoul"
    assert [type(t) for t in user.address.tags] == [Tag, Tag]
    assert [t.label for t in user.address.tags] == ["home", "main"]
    assert [a.city for a in user.history] == ["Busan", "Daegu"]
    assert all(isinstance(a, Address) for a in user.history)
    assert not hasattr(user.history[1], "zip")
    assert not hasattr(user.history[0], "tags")


def test_reconstruct_nested_single_object_becomes_list(models, store):
    User, Address, _ = models
    user = reconstruct(User, {"history": {"city": "Seoul"}}, store)

    assert len(user.history) == 1
    assert isinstance(user.history[0], Address)
    assert user.history[0].city == "Seoul"


def test_reconstruct_object_holding_list_keeps_every_element(models, store):
    User, Address, _ = models
    user = reconstruct(User, {"address": [{"city": "a"}, {"city": "b"}]}, store)

    assert all(isinstance(a, Address) for a in user.address)
    assert [a.city for a in user.address] == ["a", "b"]


def test_reconstruct_embedded_scalar_is_kept_verbatim(models, store):
    User, _, _ = models
    user = reconstruct(User, {"address": "Seoul", "history": ["x", {"city": "b"}]}, store)

    assert user.address == "Seoul"
    assert user.history[0] == "x"
    assert user.history[1].city == "b"


def test_reconstruct_leaf_list_is_copied_verbatim(models, store):
    User, _, _ = models
    user = reconstruct(User, {"values": [1, 2, 3]}, store)
    assert user.values == [1, 2, 3]


def test_dump_mapping_passes_through(models, store):
    User, _, _ = models
    source = {"name": "Bob", "extra": 1}
    dumped = dump(User, source, store)
    assert dumped == source
    assert dumped is not source


def test_dump_instance_round_trips_set_fields(models, store):
    User, _, _ = models
    raw = {
        "name": "Bob",
        "address": {"city": "Seoul", "tags": [{"label": "home"}]},
        "history": [{"city": "Busan"}],
    }
    user = reconstruct(User, raw, store)
    assert dump(User, user, store) == raw
