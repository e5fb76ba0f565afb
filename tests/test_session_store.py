"""Unit tests for session persistence"""

import json
from concurrent.futures import ThreadPoolExecutor

from score_client.models import Session, User
from score_client.session_store import FileStorage, MemoryStorage, SessionStore, origin_slug


class TestSessionStore:
    def test_load_empty_store(self, store):
        assert store.load() is None
        assert store.token == ""

    def test_save_writes_token_and_user_keys(self, store, storage, session):
        store.save(session)

        assert storage.data["token"] == "tok-123"
        assert json.loads(storage.data["user"]) == {
            "id": "u1",
            "name": "Ada Lovelace",
            "email": "ada@example.com",
        }

    def test_save_then_load(self, store, session):
        store.save(session)

        loaded = store.load()
        assert loaded == session
        assert store.token == "tok-123"

    def test_clear_removes_session(self, logged_in_store, storage):
        logged_in_store.clear()

        assert logged_in_store.load() is None
        assert storage.data == {}

    def test_clear_without_session_is_harmless(self, store):
        store.clear()
        assert store.load() is None

    def test_malformed_user_json_is_absent(self):
        store = SessionStore(MemoryStorage({"token": "abc", "user": "{not json"}))
        assert store.load() is None

    def test_user_not_an_object_is_absent(self):
        store = SessionStore(MemoryStorage({"token": "abc", "user": "[1, 2]"}))
        assert store.load() is None

    def test_empty_token_is_absent(self):
        store = SessionStore(MemoryStorage({"token": "", "user": "{}"}))
        assert store.load() is None

    def test_token_without_user_record(self):
        store = SessionStore(MemoryStorage({"token": "abc"}))

        loaded = store.load()
        assert loaded is not None
        assert loaded.token == "abc"
        assert loaded.user.email == ""

    def test_user_with_mongo_id(self):
        raw = json.dumps({"_id": "65f0", "name": "Grace", "email": "grace@example.com"})
        store = SessionStore(MemoryStorage({"token": "abc", "user": raw}))

        assert store.load().user.id == "65f0"


class TestFileStorage:
    def test_origin_slug(self):
        assert origin_slug("http://localhost:5000") == "http_localhost_5000"
        assert origin_slug("https://API.example.com/") == "https_api_example_com_443"
        assert origin_slug("http://example.com") == "http_example_com_80"

    def test_session_survives_new_store_instance(self, tmp_path):
        first = SessionStore(FileStorage(tmp_path, "http://localhost:5000"))
        first.save(Session(token="t1", user=User(id="1", name="A", email="a@x.io")))

        # a fresh process sees the same session
        second = SessionStore(FileStorage(tmp_path, "http://localhost:5000"))
        loaded = second.load()
        assert loaded is not None
        assert loaded.token == "t1"
        assert loaded.user.email == "a@x.io"

    def test_sessions_are_scoped_per_origin(self, tmp_path):
        local = SessionStore(FileStorage(tmp_path, "http://localhost:5000"))
        prod = SessionStore(FileStorage(tmp_path, "https://score.example.com"))
        local.save(Session(token="local", user=User(id="1", name="", email="")))

        assert prod.load() is None
        assert local.load().token == "local"

    def test_clear_deletes_file(self, tmp_path):
        backend = FileStorage(tmp_path, "http://localhost:5000")
        store = SessionStore(backend)
        store.save(Session(token="t1", user=User(id="1", name="A", email="a@x.io")))
        assert backend.path.exists()

        store.clear()

        assert not backend.path.exists()
        assert store.load() is None

    def test_corrupt_file_is_treated_as_absent(self, tmp_path):
        backend = FileStorage(tmp_path, "http://localhost:5000")
        backend.path.write_text("{{{ definitely not json", encoding="utf-8")

        assert SessionStore(backend).load() is None

    def test_non_object_file_is_treated_as_absent(self, tmp_path):
        backend = FileStorage(tmp_path, "http://localhost:5000")
        backend.path.write_text('["token"]', encoding="utf-8")

        assert SessionStore(backend).load() is None

    def test_save_over_corrupt_file_recovers(self, tmp_path):
        backend = FileStorage(tmp_path, "http://localhost:5000")
        backend.path.write_text("garbage", encoding="utf-8")
        store = SessionStore(backend)

        store.save(Session(token="fresh", user=User(id="1", name="", email="")))

        assert store.load().token == "fresh"

    def test_lock_file_is_stable_sidecar(self, tmp_path):
        backend = FileStorage(tmp_path, "http://localhost:5000")
        backend.set("token", "t1")

        assert backend.lock_path == tmp_path / "http_localhost_5000.lock"
        assert backend.lock_path.exists()
        assert not backend.path.with_suffix(".tmp").exists()

    def test_concurrent_writers_keep_every_key(self, tmp_path):
        # separate instances open separate lock descriptors, like separate processes
        def write(i):
            FileStorage(tmp_path, "http://localhost:5000").set(f"key{i}", str(i))

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(write, range(40)))

        backend = FileStorage(tmp_path, "http://localhost:5000")
        assert all(backend.get(f"key{i}") == str(i) for i in range(40))
