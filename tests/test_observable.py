"""
Observable Tests - Unit Tests for Observable Values

This module tests immediate emission on subscribe, deduplication of
unchanged values, dispatcher attachment tied to subscribers, and ordering
of emissions under concurrent writes.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- currencies.adapters.persistence (NamespacedStore, ValueKind, ObservableValue)
- unittest.mock (patch for simulating disk failures)
- pytest (testing framework)
"""
import json  # Write stored records by hand
import threading  # Concurrent writers

import pytest  # Testing framework for writing and running tests

from unittest.mock import Mock, patch  # Mock callbacks and failure injection

from currencies.adapters.persistence import NamespacedStore, ValueKind  # Store and scalar kinds
from currencies.domain.errors import StoreWriteError  # Raised on rejected writes


class TestSubscribe:
    def test_emits_current_value_immediately(self, store, recorder):
        store.set_int("_theme", 1)
        store.observe("_theme", ValueKind.INT, 2).subscribe(recorder)
        assert recorder.values == [1]

    def test_emits_default_when_absent(self, store, recorder):
        store.observe("_theme", ValueKind.INT, 2).subscribe(recorder)
        assert recorder.values == [2]

    def test_emits_on_change(self, store, recorder):
        store.observe("_theme", ValueKind.INT, 2).subscribe(recorder)
        store.set_int("_theme", 0)
        store.set_int("_theme", 1)
        assert recorder.values == [2, 0, 1]

    def test_removal_emits_default(self, store, recorder):
        store.set_bool("_feeEnabled", True)
        store.observe("_feeEnabled", ValueKind.BOOL, False).subscribe(recorder)
        store.remove("_feeEnabled")
        assert recorder.values == [True, False]

    def test_second_subscriber_gets_current_value(self, store, make_recorder):
        observable = store.observe("_theme", ValueKind.INT, 2)
        first, second = make_recorder(), make_recorder()
        observable.subscribe(first)
        store.set_int("_theme", 1)
        observable.subscribe(second)
        assert first.values == [2, 1]
        assert second.values == [1]


class TestDeduplication:
    def test_unrelated_key_does_not_emit(self, store, recorder):
        store.observe("_fee", ValueKind.FLOAT, 2.2).subscribe(recorder)
        store.set_int("_theme", 1)
        store.set_bool("_feeEnabled", True)
        assert recorder.values == [2.2]

    def test_same_value_does_not_emit(self, store, recorder):
        store.set_int("_theme", 1)
        store.observe("_theme", ValueKind.INT, 2).subscribe(recorder)
        store.set_int("_theme", 1)
        assert recorder.values == [1]

    def test_writing_default_explicitly_does_not_emit(self, store, recorder):
        store.observe("_theme", ValueKind.INT, 2).subscribe(recorder)
        store.set_int("_theme", 2)
        assert recorder.values == [2]

    def test_stored_nan_does_not_emit_on_every_commit(self, data_dir, recorder):
        data_dir.mkdir(parents=True)
        (data_dir / "preferences.json").write_text(json.dumps({
            "_fee": {"t": "f", "v": "0000c07f"},
        }), encoding="utf-8")
        store = NamespacedStore("preferences", data_dir)

        store.observe("_fee", ValueKind.FLOAT, 2.2).subscribe(recorder)
        store.set_int("_theme", 1)
        store.set_int("_theme", 0)

        assert recorder.values == [2.2]


class TestLifecycle:
    def test_attach_and_detach(self, store, make_recorder):
        theme = store.observe("_theme", ValueKind.INT, 2)
        fee = store.observe("_fee", ValueKind.FLOAT, 2.2)
        assert store.listener_count == 0

        sub1 = theme.subscribe(make_recorder())
        sub2 = theme.subscribe(make_recorder())
        sub3 = fee.subscribe(make_recorder())
        assert store.listener_count == 2
        assert theme.subscriber_count == 2

        sub1.dispose()
        assert store.listener_count == 2
        sub2.dispose()
        assert store.listener_count == 1
        sub3.dispose()
        assert store.listener_count == 0

    def test_dispose_is_idempotent(self, store, recorder):
        subscription = store.observe("_theme", ValueKind.INT, 2).subscribe(recorder)
        subscription.dispose()
        subscription.dispose()
        assert not subscription.active
        assert store.listener_count == 0

    def test_no_emission_after_dispose(self, store, recorder):
        with store.observe("_theme", ValueKind.INT, 2).subscribe(recorder):
            store.set_int("_theme", 1)
        store.set_int("_theme", 0)
        assert recorder.values == [2, 1]

    def test_resubscribe_is_fresh(self, store, make_recorder):
        observable = store.observe("_theme", ValueKind.INT, 2)
        observable.subscribe(make_recorder()).dispose()
        store.set_int("_theme", 1)

        again = make_recorder()
        observable.subscribe(again)
        assert again.values == [1]
        assert store.listener_count == 1

    def test_value_property(self, store, recorder):
        observable = store.observe("_theme", ValueKind.INT, 2)
        assert observable.value == 2
        observable.subscribe(recorder)
        store.set_int("_theme", 0)
        assert observable.value == 0


class TestFailures:
    def test_failing_subscriber_does_not_block_others(self, store, recorder):
        observable = store.observe("_theme", ValueKind.INT, 2)
        broken = Mock(side_effect=ValueError("boom"))
        observable.subscribe(broken)
        observable.subscribe(recorder)

        store.set_int("_theme", 1)

        assert broken.call_count == 2
        assert recorder.values == [2, 1]

    @patch("currencies.adapters.persistence.file_store.os.replace")
    def test_failed_write_does_not_emit(self, mock_replace, store, recorder):
        store.observe("_theme", ValueKind.INT, 2).subscribe(recorder)
        mock_replace.side_effect = OSError("disk full")
        with pytest.raises(StoreWriteError):
            store.set_int("_theme", 1)
        assert recorder.values == [2]


class TestOrdering:
    def test_emissions_follow_commit_order(self, store, recorder):
        store.observe("_count", ValueKind.INT, 0).subscribe(recorder)

        def work():
            for _ in range(20):
                store.update("_count", ValueKind.INT, 0, lambda v: v + 1)

        threads = [threading.Thread(target=work) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert recorder.values == list(range(61))

    def test_write_back_keeps_order_for_all_subscribers(self, store, recorder):
        observable = store.observe("_theme", ValueKind.INT, 2)

        def reset_light(value):
            if value == 1:
                store.set_int("_theme", 0)

        observable.subscribe(reset_light)
        observable.subscribe(recorder)

        store.set_int("_theme", 1)

        assert recorder.values == [2, 1, 0]
        assert recorder.last == store.get_int("_theme", 2) == 0
