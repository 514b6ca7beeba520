from typing import List, Optional

import pytest
from pydantic import BaseModel

from warden.errors import InvalidInputError, UserNotFound
from warden.services import merge_layers


class UiPrefs(BaseModel):
    theme: Optional[str] = None
    page_size: Optional[int] = None
    columns: Optional[List[str]] = None


def test_merge_skips_nulls():
    assert merge_layers([{"a": 1, "b": 2}, {"b": None, "c": 3}]) == {"a": 1, "b": 2, "c": 3}


def test_merge_is_recursive_for_objects():
    base = {"ui": {"theme": "light", "font": {"size": 12, "family": "mono"}}}
    override = {"ui": {"font": {"size": 14}}}
    assert merge_layers([base, override]) == {"ui": {"theme": "light", "font": {"size": 14, "family": "mono"}}}


def test_merge_replaces_arrays_and_scalars_wholesale():
    assert merge_layers([{"tags": [1, 2, 3]}, {"tags": [9]}]) == {"tags": [9]}
    assert merge_layers([{"x": {"nested": True}}, {"x": 5}]) == {"x": 5}
    assert merge_layers([{"x": 5}, {"x": {"nested": True}}]) == {"x": {"nested": True}}


def test_merge_is_associative():
    a = {"a": 1, "n": {"x": 1, "y": [1]}}
    b = {"n": {"y": [2], "z": None}, "b": None}
    c = {"n": {"x": {"deep": 1}}, "c": [3]}
    assert merge_layers([a, b, c]) == merge_layers([merge_layers([a, b]), c])


def test_merge_edge_cases():
    assert merge_layers([]) is None
    assert merge_layers([{"a": 1}]) == {"a": 1}
    # non-object later layers are ignored
    assert merge_layers([{"a": 1}, ["junk"], "junk", {"b": 2}]) == {"a": 1, "b": 2}
    with pytest.raises(InvalidInputError):
        merge_layers([["not", "an", "object"], {"a": 1}])


def test_merge_does_not_mutate_inputs():
    base = {"n": {"x": 1}}
    merge_layers([base, {"n": {"x": 2}}])
    assert base == {"n": {"x": 1}}


async def test_get_preferences_defaults_to_empty(services):
    user = await services.users.create_user()
    assert await services.preferences.get_preferences(user.id, "ui") == {}
    assert await services.preferences.get_preferences(user.id, "ui", model=UiPrefs) == UiPrefs()


async def test_set_preferences_overwrites_per_namespace(services, store):
    user = await services.users.create_user()
    prefs = services.preferences

    first = await prefs.set_preferences(user.id, "ui", {"theme": "dark", "page_size": 50})
    second = await prefs.set_preferences(user.id, "ui", UiPrefs(theme="light"))
    await prefs.set_preferences(user.id, "mail", {"digest": "weekly"})

    assert second.id == first.id
    assert await prefs.get_preferences(user.id, "ui") == {"theme": "light", "page_size": None, "columns": None}
    assert await prefs.get_preferences(user.id, "mail") == {"digest": "weekly"}


async def test_set_preferences_validation(services):
    user = await services.users.create_user()
    with pytest.raises(InvalidInputError):
        await services.preferences.set_preferences(user.id, " ", {"a": 1})
    with pytest.raises(InvalidInputError):
        await services.preferences.set_preferences(user.id, "ui", ["a"])
    with pytest.raises(UserNotFound):
        await services.preferences.set_preferences("missing", "ui", {"a": 1})


async def test_stored_preferences_are_isolated_from_caller_mutation(services):
    user = await services.users.create_user()
    data = {"theme": "dark"}
    await services.preferences.set_preferences(user.id, "ui", data)
    data["theme"] = "pink"
    got = await services.preferences.get_preferences(user.id, "ui")
    got["theme"] = "green"
    assert await services.preferences.get_preferences(user.id, "ui") == {"theme": "dark"}


def test_merge_preferences_with_models(services):
    defaults = UiPrefs(theme="light", page_size=20, columns=["name", "status"])
    org = {"page_size": 50}
    user = UiPrefs(theme="dark")

    merged = services.preferences.merge_preferences(defaults, org, user, model=UiPrefs)
    assert merged == UiPrefs(theme="dark", page_size=50, columns=["name", "status"])
    assert services.preferences.merge_preferences() is None
