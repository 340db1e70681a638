"""
Unit tests for SyncSignal
"""
from unittest.mock import Mock

from login_tools.quick_login.exceptions import PageError
from login_tools.quick_login.pages.soup_page import SoupPage
from login_tools.quick_login.sync_signal import SyncSignal, DEFAULT_EVENT_NAME


class TestSyncSignal:
    """Test SyncSignal functionality"""

    def test_unbound_emit_calls_listeners(self):
        signal = SyncSignal()
        listener = Mock()
        signal.connect(listener)
        signal.connect(listener)

        signal.emit()
        listener.assert_called_once_with()

    def test_disconnect(self):
        signal = SyncSignal()
        listener = Mock()
        signal.connect(listener)
        signal.disconnect(listener)

        signal.emit()
        listener.assert_not_called()

    def test_failing_listener_does_not_stop_others(self):
        signal = SyncSignal()
        second = Mock()
        signal.connect(Mock(side_effect=RuntimeError("boom")))
        signal.connect(second)

        signal.emit()
        second.assert_called_once_with()

    def test_page_event_round_trip(self):
        page = SoupPage('<html><body></body></html>', 'https://x.example.com/')
        consumer = SyncSignal(page)
        producer = SyncSignal(page)
        listener = Mock()
        consumer.connect(listener)
        consumer.listen()

        producer.emit()
        assert page.dispatched_events == [DEFAULT_EVENT_NAME]
        assert consumer.poll() is True
        assert consumer.poll() is False
        listener.assert_called_once_with()

    def test_event_without_listener_is_lost(self):
        page = SoupPage('<html><body></body></html>', 'https://x.example.com/')
        consumer = SyncSignal(page)
        listener = Mock()
        consumer.connect(listener)

        SyncSignal(page).emit()
        consumer.listen()
        assert consumer.poll() is False
        listener.assert_not_called()

    def test_dispatch_failure_is_contained(self):
        page = Mock()
        page.dispatch_event.side_effect = PageError("tab closed")
        SyncSignal(page).emit()
        page.dispatch_event.assert_called_once_with(DEFAULT_EVENT_NAME)

    def test_custom_event_name(self):
        page = SoupPage('<html></html>', 'https://x.example.com/')
        signal = SyncSignal(page, 'otherEvent')
        signal.listen()
        SyncSignal(page).emit()
        assert signal.poll() is False
