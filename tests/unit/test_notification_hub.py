"""Unit tests for NotificationHub and PresenceTracker."""

from src.marketplace import Marketplace
from src.sm_gateway.user.models import User
from src.sm_realtime.hub import NotificationHub, conversation_channel, user_channel
from src.sm_realtime.presence import PresenceTracker
from tests.helpers import drain


class TestNotificationHub:
    def test_publish_reaches_only_subscribed_sessions(self) -> None:
        hub = NotificationHub()
        a = hub.connect("USR_a")
        b = hub.connect("USR_b")
        hub.subscribe(a.id, user_channel("USR_a"))
        hub.subscribe(b.id, user_channel("USR_b"))

        assert hub.publish("paymentCompleted", {"x": 1}, [user_channel("USR_a")]) == 1
        assert drain(a) == [{"event": "paymentCompleted", "data": {"x": 1}}]
        assert drain(b) == []

    def test_at_most_once_per_session_per_publish(self) -> None:
        hub = NotificationHub()
        s = hub.connect("USR_a")
        hub.subscribe(s.id, user_channel("USR_a"))
        hub.subscribe(s.id, conversation_channel("CONV_1"))

        delivered = hub.publish(
            "newMessage", {}, [conversation_channel("CONV_1"), user_channel("USR_a")]
        )
        assert delivered == 1
        assert len(drain(s)) == 1

    def test_subscribe_twice_reports_false(self) -> None:
        hub = NotificationHub()
        s = hub.connect("USR_a")
        assert hub.subscribe(s.id, user_channel("USR_a")) is True
        assert hub.subscribe(s.id, user_channel("USR_a")) is False

    def test_no_replay_after_disconnect(self) -> None:
        hub = NotificationHub()
        s = hub.connect("USR_a")
        hub.subscribe(s.id, user_channel("USR_a"))
        hub.disconnect(s.id)

        assert hub.publish("paymentCompleted", {}, [user_channel("USR_a")]) == 0
        assert hub.subscribers(user_channel("USR_a")) == set()
        assert hub.session_count == 0
        fresh = hub.connect("USR_a")
        assert drain(fresh) == []

    def test_full_queue_drops_without_blocking(self) -> None:
        hub = NotificationHub(queue_size=2)
        s = hub.connect("USR_a")
        hub.subscribe(s.id, user_channel("USR_a"))
        results = [hub.publish("tick", {"n": n}, [user_channel("USR_a")]) for n in range(3)]
        assert results == [1, 1, 0]
        assert [f["data"]["n"] for f in drain(s)] == [0, 1]

    def test_disconnect_unknown_session(self) -> None:
        assert NotificationHub().disconnect("sess_missing") is None


class TestPresenceTracker:
    def test_online_while_any_session_active(self, market: Marketplace, buyer: User) -> None:
        presence = PresenceTracker(market.identity)
        presence.session_joined(buyer.id)
        presence.session_joined(buyer.id)
        assert buyer.is_online is True
        assert presence.active_sessions(buyer.id) == 2

        presence.session_left(buyer.id)
        assert buyer.is_online is True
        presence.session_left(buyer.id)
        assert buyer.is_online is False
        assert presence.active_sessions(buyer.id) == 0

    def test_extra_leave_is_ignored(self, market: Marketplace, buyer: User) -> None:
        presence = PresenceTracker(market.identity)
        presence.session_left(buyer.id)
        assert presence.active_sessions(buyer.id) == 0
        assert buyer.is_online is False
