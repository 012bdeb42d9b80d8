"""
Tests for the Debouncer.
"""
import threading
from unittest.mock import Mock

from bucket_sync.services.debouncer import Debouncer


def test_burst_produces_single_call():
    fired = threading.Event()
    callback = Mock(side_effect=lambda: fired.set())
    debouncer = Debouncer(0.05, callback)

    for _ in range(25):
        debouncer.trigger()

    assert fired.wait(2.0)
    threading.Event().wait(0.2)
    assert callback.call_count == 1
    assert debouncer.pending is False


def test_separate_windows_produce_separate_calls():
    fired = threading.Event()
    callback = Mock(side_effect=lambda: fired.set())
    debouncer = Debouncer(0.02, callback)

    debouncer.trigger()
    assert fired.wait(2.0)
    fired.clear()
    debouncer.trigger()
    assert fired.wait(2.0)

    assert callback.call_count == 2


def test_cancel_drops_pending_call():
    callback = Mock()
    debouncer = Debouncer(10, callback)

    debouncer.trigger()
    assert debouncer.pending is True
    debouncer.cancel()

    assert debouncer.pending is False
    callback.assert_not_called()


def test_flush_runs_pending_call_now():
    callback = Mock()
    debouncer = Debouncer(10, callback)

    debouncer.trigger()
    debouncer.trigger()
    debouncer.flush()

    callback.assert_called_once()
    assert debouncer.pending is False


def test_flush_without_pending_call_is_noop():
    callback = Mock()
    debouncer = Debouncer(10, callback)

    debouncer.flush()

    callback.assert_not_called()


def test_callback_error_does_not_break_debouncer():
    callback = Mock(side_effect=[RuntimeError('boom'), None])
    debouncer = Debouncer(10, callback)

    debouncer.trigger()
    debouncer.flush()
    debouncer.trigger()
    debouncer.flush()

    assert callback.call_count == 2
