import pytest

from minirel import Entity, Number, Text, BelongsTo, MemoryStore
from minirel.errors import ConfigurationError, NotFound
from minirel.store import EntityStore


class Library(Entity):
    id = Number(pk=True)
    name = Text()
    books_count = Number(default=0)


class Book(Entity):
    id = Number(pk=True)
    title = Text()
    library = BelongsTo(Library, counter_cache=True)


class Ebook(Book):
    fmt = Text()


@pytest.fixture
def store():
    return MemoryStore()


def test_memory_store_is_an_entity_store(store):
    assert isinstance(store, EntityStore)


def test_create_assigns_sequential_identifiers(store):
    first = store.create(Library, {"name": "a"})
    second = store.create(Library, {"name": "b"})
    assert (first.id, second.id) == (1, 2)
    assert not first.new_record()
    assert first._store is store
    assert store.find(Library, 2) is second


def test_explicit_identifier_advances_the_sequence(store):
    store.create(Library, {"id": 10})
    assert store.create(Library, {}).id == 11
    with pytest.raises(ValueError):
        store.create(Library, {"id": 10})


def test_build_is_unsaved(store):
    library = store.build(Library, {"name": "a"})
    assert library.new_record()
    assert library._store is store
    assert store.all(Library) == []


def test_find_miss_raises(store):
    with pytest.raises(NotFound) as exc:
        store.find(Library, 5)
    assert exc.value.identifier == 5
    assert "Library" in str(exc.value)


def test_subclasses_share_identifiers_with_their_root(store):
    book = store.create(Book, {"title": "paper"})
    ebook = store.create(Ebook, {"title": "bits", "fmt": "epub"})
    assert ebook.id == book.id + 1
    assert store.find(Book, ebook.id) is ebook
    with pytest.raises(NotFound):
        store.find(Ebook, book.id)
    assert store.all(Ebook) == [ebook]


def test_unknown_condition_column_is_a_configuration_error(store):
    library = store.create(Library, {})
    with pytest.raises(ConfigurationError):
        store.find_by_identifier(Library, library.id, conditions={"city": "x"})


def test_saving_new_owner_increments_counter(store):
    library = store.create(Library, {})
    store.create(Book, {"library_id": library.id})
    store.create(Ebook, {"library": library})
    assert library.books_count == 2


def test_destroy_decrements_counter(store):
    library = store.create(Library, {})
    book = store.create(Book, {"library": library})

    store.destroy(book)

    assert library.books_count == 0
    assert not book.new_record()
    with pytest.raises(NotFound):
        store.find(Book, book.id)


def test_save_persists_unsaved_target_first(store):
    library = Library(name="new")
    book = store.build(Book, {"library": library})

    store.save(book)

    assert library.id == 1
    assert book.library_id == library.id
    assert store.find(Library, 1) is library
    assert library.books_count == 1


def test_counter_on_unknown_identifier_is_a_noop(store):
    store.increment_counter(Library, "books_count", 99)
    store.decrement_counter(Library, "books_count", 99)
    assert store.all(Library) == []


def test_counter_column_must_be_declared(store):
    library = store.create(Library, {})
    with pytest.raises(ConfigurationError):
        store.increment_counter(Library, "pages_count", library.id)


def test_include_must_name_an_association(store):
    library = store.create(Library, {})
    with pytest.raises(ConfigurationError):
        store.find_by_identifier(Library, library.id, include=["books"])
