import pytest
from pydantic import ValidationError

from minirel import Entity, Number, BelongsTo
from minirel.errors import ConfigurationError
from minirel.reflection import BelongsToReflection, underscore


class Forum(Entity):
    id = Number(pk=True)
    forum_threads_count = Number(default=0)


class ForumThread(Entity):
    id = Number(pk=True)
    forum = BelongsTo(Forum, counter_cache=True)
    moderator = BelongsTo("forums", foreign_key="moderated_forum")


def test_underscore():
    assert underscore("ForumThread") == "forum_thread"
    assert underscore("HTTPRequest") == "http_request"
    assert underscore("pet") == "pet"


def test_foreign_key_is_derived_from_name():
    reflection = ForumThread._mapper.reflections["forum"]
    assert reflection.foreign_key == "forum_id"
    assert "forum_id" in ForumThread._mapper.columns
    assert ForumThread._mapper.foreign_keys["forum_id"] == "forum"


def test_explicit_foreign_key():
    reflection = ForumThread._mapper.reflections["moderator"]
    assert reflection.foreign_key == "moderated_forum"
    assert reflection.counter_cache_column is None


def test_counter_cache_true_uses_owner_table():
    reflection = ForumThread._mapper.reflections["forum"]
    assert ForumThread._mapper.table_name == "forum_threads"
    assert reflection.counter_cache_column == "forum_threads_count"


def test_counter_cache_by_name():
    reflection = BelongsToReflection(name="forum", target=Forum, counter_cache="replies")
    assert reflection.counter_cache_column == "replies"


def test_counter_cache_true_needs_owner_table():
    with pytest.raises(ValidationError):
        BelongsToReflection(name="forum", target=Forum, counter_cache=True)


def test_include_accepts_a_single_name():
    reflection = BelongsToReflection(name="forum", target=Forum, include="moderator")
    assert reflection.include == ["moderator"]


def test_target_resolves_by_class_name_and_table_name():
    assert BelongsToReflection(name="forum", target="Forum").target_type is Forum
    assert BelongsToReflection(name="forum", target="forums").target_type is Forum
    assert ForumThread._mapper.reflections["moderator"].target_type is Forum


def test_unknown_target_fails_on_use():
    reflection = BelongsToReflection(name="ghost", target="Nowhere")
    with pytest.raises(ConfigurationError):
        reflection.target_type


@pytest.mark.parametrize("options", [
    {"bogus": True},
    {"foreign_key": "not valid"},
    {"counter_cache": "no spaces allowed"},
    {"foreign_key": "forum"},
])
def test_invalid_options_are_rejected(options):
    with pytest.raises(ConfigurationError):
        BelongsToReflection.from_declaration("forum", BelongsTo(Forum, **options), "posts")


def test_invalid_target_is_rejected():
    with pytest.raises(ValidationError):
        BelongsToReflection(name="forum", target=42)


def test_bad_declaration_fails_at_class_definition():
    with pytest.raises(ConfigurationError):
        class BrokenThread(Entity):
            id = Number(pk=True)
            forum = BelongsTo(Forum, required="maybe")


def test_foreign_key_clashing_with_association_fails():
    with pytest.raises(ConfigurationError):
        class ClashingThread(Entity):
            id = Number(pk=True)
            forum = BelongsTo(Forum, foreign_key="starter")
            starter = BelongsTo(Forum)
