"""
Namespaced Store Tests - Unit Tests for Typed Namespace Access

This module tests typed reads with defaults, write-through persistence,
batched edits, namespace isolation and the read-modify-write primitive.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- currencies.adapters.persistence (NamespacedStore, Editor, ValueKind)
- currencies.domain.errors (InvalidNamespaceError, StoreWriteError)
- unittest.mock (patch for simulating disk failures)
- pytest (testing framework)
"""
import json  # Write malformed files by hand
import threading  # Concurrent toggles

import pytest  # Testing framework for writing and running tests

from unittest.mock import patch  # Patching for simulating write failures

from currencies.adapters.persistence import Editor, NamespacedStore, ValueKind  # Store under test
from currencies.domain.errors import InvalidNamespaceError, StoreWriteError  # Store errors


class TestReads:
    def test_defaults_on_empty_namespace(self, store):
        assert store.get_string("_last_from", "USD") == "USD"
        assert store.get_int("_theme", 2) == 2
        assert store.get_bool("_feeEnabled", False) is False
        assert store.get_float("_fee", 2.2) == 2.2
        assert store.get_string_set("_stars") == frozenset()
        assert store.get_string("_base") is None

    def test_malformed_records_give_defaults(self, data_dir):
        data_dir.mkdir(parents=True)
        (data_dir / "preferences.json").write_text(json.dumps({
            "_theme": {"t": "s", "v": "dark"},
            "_fee": {"t": "f", "v": "zz"},
            "_api": "garbage",
        }), encoding="utf-8")

        store = NamespacedStore("preferences", data_dir)

        assert store.get_int("_theme", 2) == 2
        assert store.get_float("_fee", 2.2) == 2.2
        assert store.get_int("_api", 0) == 0

    def test_corrupt_namespace_file_gives_defaults(self, data_dir):
        data_dir.mkdir(parents=True)
        (data_dir / "preferences.json").write_text("{{{", encoding="utf-8")
        store = NamespacedStore("preferences", data_dir)
        assert store.get_int("_theme", 2) == 2


class TestWrites:
    def test_set_is_durable(self, store, data_dir):
        store.set_int("_theme", 1)
        store.set_float("_fee", 2.5)

        reopened = NamespacedStore("preferences", data_dir)
        assert reopened.get_int("_theme", 2) == 1
        assert reopened.get_float("_fee", 2.2) == 2.5

    def test_set_none_removes_key(self, store):
        store.set_string("_last_from", "CHF")
        store.set_string("_last_from", None)
        assert not store.contains("_last_from")
        assert store.get_string("_last_from", "USD") == "USD"

    def test_set_twice_is_idempotent(self, store, data_dir):
        store.set_int("_theme", 0)
        first = (data_dir / "preferences.json").read_text(encoding="utf-8")
        store.set_int("_theme", 0)
        assert (data_dir / "preferences.json").read_text(encoding="utf-8") == first
        assert store.get_int("_theme", 2) == 0

    def test_set_rejects_wrong_type(self, store):
        with pytest.raises(TypeError):
            store.set_int("_theme", "dark")
        assert not store.contains("_theme")

    def test_set_string_set_from_generator(self, store):
        store.set_string_set("_stars", (code for code in ["JPY", "EUR"]))
        assert store.get_string_set("_stars") == frozenset({"EUR", "JPY"})

    def test_set_float_rejects_nan(self, store):
        with pytest.raises(ValueError):
            store.set_float("_fee", float("nan"))
        assert not store.contains("_fee")

    @patch("currencies.adapters.persistence.file_store.os.replace")
    def test_write_failure_propagates(self, mock_replace, store):
        mock_replace.side_effect = OSError("read-only file system")
        with pytest.raises(StoreWriteError):
            store.set_bool("_feeEnabled", True)
        assert store.get_bool("_feeEnabled", False) is False

    def test_clear_all_is_isolated(self, data_dir):
        preferences = NamespacedStore("preferences", data_dir)
        last_state = NamespacedStore("last_state", data_dir)
        preferences.set_int("_theme", 1)
        last_state.set_string("_last_from", "GBP")

        preferences.clear_all()

        assert preferences.keys() == []
        assert last_state.get_string("_last_from", "USD") == "GBP"

    def test_same_key_in_two_namespaces(self, data_dir):
        rates = NamespacedStore("rates", data_dir)
        preferences = NamespacedStore("preferences", data_dir)
        rates.set_string("_base", "EUR")
        preferences.set_string("_base", "JPY")
        assert rates.get_string("_base") == "EUR"
        assert preferences.get_string("_base") == "JPY"

    @pytest.mark.parametrize("name", ["", "Rates", "../rates", "rates/x", "prefs.json"])
    def test_invalid_namespace_names(self, name, data_dir):
        with pytest.raises(InvalidNamespaceError):
            NamespacedStore(name, data_dir)


class TestEdit:
    def test_batch_commits_once(self, store):
        with store.edit() as editor:
            editor.put_int("_theme", 1).put_bool("_feeEnabled", True)
        assert store.get_int("_theme", 2) == 1
        assert store.get_bool("_feeEnabled", False) is True

    def test_batch_is_discarded_on_error(self, store):
        with pytest.raises(RuntimeError):
            with store.edit() as editor:
                editor.put_int("_theme", 1)
                raise RuntimeError("abort")
        assert not store.contains("_theme")

    def test_clear_drops_earlier_puts(self):
        editor = Editor().put_int("a", 1).clear().put_int("b", 2)
        data, changed = editor.apply_to({"c": {"t": "i", "v": 3}})
        assert data == {"b": {"t": "i", "v": 2}}
        assert changed == frozenset({"b", "c"})

    def test_unchanged_values_are_not_reported(self):
        base = {"a": {"t": "i", "v": 1}}
        _, changed = Editor().put_int("a", 1).apply_to(base)
        assert changed == frozenset()


class TestUpdate:
    def test_update_uses_default(self, store):
        assert store.update("_count", ValueKind.INT, 10, lambda v: v + 1) == 11
        assert store.get_int("_count") == 11

    def test_concurrent_updates_do_not_lose_writes(self, store):
        def work():
            for _ in range(25):
                store.update("_count", ValueKind.INT, 0, lambda v: v + 1)

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get_int("_count") == 100
