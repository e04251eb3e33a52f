from __future__ import annotations

from stockpile.config import get_settings
from stockpile.db.documents import MemoryDocumentStore, SqlDocumentStore
from stockpile.db.models import DocumentORM
from stockpile.db.repository import get_engine, reset_repository_state, session_scope


def test_sql_store_is_empty_until_saved():
    assert SqlDocumentStore().load() is None


def test_sql_store_persists_and_overwrites():
    store = SqlDocumentStore()
    store.save({"version": "1.0.0", "items": []})
    store.save({"version": "1.0.0", "items": [{"id": "a"}]})

    assert store.load() == {"version": "1.0.0", "items": [{"id": "a"}]}
    with session_scope() as session:
        assert session.query(DocumentORM).count() == 1


def test_sql_store_survives_engine_reset():
    SqlDocumentStore().save({"selectedKitId": "minimal-essentials"})
    reset_repository_state()

    assert SqlDocumentStore().load() == {"selectedKitId": "minimal-essentials"}
    assert get_settings().database_path.exists()


def test_sql_store_keys_are_independent():
    SqlDocumentStore("first").save({"n": 1})

    assert SqlDocumentStore("second").load() is None


def test_stores_on_separate_files_do_not_share_documents(tmp_path):
    archive = tmp_path / "archive" / "stockpile.db"
    SqlDocumentStore().save({"n": 1})
    SqlDocumentStore(database_path=archive).save({"n": 2})

    assert SqlDocumentStore().load() == {"n": 1}
    assert SqlDocumentStore(database_path=archive).load() == {"n": 2}
    assert archive.exists()
    assert get_engine(archive) is get_engine(archive)
    assert get_engine(archive) is not get_engine()


def test_corrupt_rows_load_as_missing():
    get_engine()
    with session_scope() as session:
        session.add(DocumentORM(key="stockpile", value="{oops"))

    assert SqlDocumentStore().load() is None


def test_memory_store_returns_copies():
    store = MemoryDocumentStore({"items": []})
    loaded = store.load()
    loaded["items"].append("mutated")

    assert store.load() == {"items": []}
    assert MemoryDocumentStore().load() is None
