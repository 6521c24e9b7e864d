"""Unit tests for ConversationStore."""

import pytest

from src.marketplace import Marketplace
from src.sm_common.errors import (
    ConversationNotFoundError,
    ForbiddenError,
    ListingNotFoundError,
    SelfConversationError,
    UserNotFoundError,
)
from src.sm_gateway.user.models import User
from src.sm_listing.domain.models import Listing


class TestOpenOrGet:
    def test_same_pair_and_listing_returns_same_conversation(
        self, market: Marketplace, provider: User, buyer: User, listing: Listing
    ) -> None:
        first = market.conversations.open_or_get(buyer.id, provider.id, listing.id)
        second = market.conversations.open_or_get(provider.id, buyer.id, listing.id)
        assert first is second
        assert first.id.startswith("CONV_")

    def test_different_listing_opens_new_conversation(
        self, market: Marketplace, provider: User, buyer: User, listing: Listing
    ) -> None:
        with_listing = market.conversations.open_or_get(buyer.id, provider.id, listing.id)
        without = market.conversations.open_or_get(buyer.id, provider.id, None)
        assert with_listing.id != without.id

    def test_self_conversation_rejected(self, market: Marketplace, buyer: User) -> None:
        with pytest.raises(SelfConversationError):
            market.conversations.open_or_get(buyer.id, buyer.id)

    def test_unknown_user_or_listing(
        self, market: Marketplace, provider: User, buyer: User
    ) -> None:
        with pytest.raises(UserNotFoundError):
            market.conversations.open_or_get(buyer.id, "USR_missing")
        with pytest.raises(ListingNotFoundError):
            market.conversations.open_or_get(buyer.id, provider.id, "SRV_missing")

    def test_get_missing(self, market: Marketplace) -> None:
        with pytest.raises(ConversationNotFoundError):
            market.conversations.get("CONV_missing")


class TestMessages:
    def test_only_participants_may_post(
        self, market: Marketplace, provider: User, buyer: User
    ) -> None:
        outsider = market.identity.register("Eve", "+22990000099", "secret9", "client")
        conv = market.conversations.open_or_get(buyer.id, provider.id)
        with pytest.raises(ForbiddenError):
            market.conversations.post_message(conv.id, outsider.id, "hi")

    def test_post_bumps_updated_at(
        self, market: Marketplace, provider: User, buyer: User
    ) -> None:
        conv = market.conversations.open_or_get(buyer.id, provider.id)
        before = conv.updated_at
        message = market.conversations.post_message(conv.id, buyer.id, "Hello")
        assert message.read is False
        assert message.kind == "text"
        assert conv.updated_at == message.created_at
        assert before is not None and conv.updated_at >= before

    def test_mark_read_is_idempotent(
        self, market: Marketplace, provider: User, buyer: User
    ) -> None:
        store = market.conversations
        conv = store.open_or_get(buyer.id, provider.id)
        store.post_message(conv.id, buyer.id, "one")
        store.post_message(conv.id, buyer.id, "two")
        store.post_message(conv.id, provider.id, "reply")

        assert store.unread_count(conv.id, provider.id) == 2
        assert store.mark_read(conv.id, provider.id) == 2
        assert store.unread_count(conv.id, provider.id) == 0
        assert store.mark_read(conv.id, provider.id) == 0
        assert store.unread_count(conv.id, provider.id) == 0
        # the reader's own message stays unread for the other side
        assert store.unread_count(conv.id, buyer.id) == 1

    def test_history_marks_read_and_is_oldest_first(
        self, market: Marketplace, provider: User, buyer: User
    ) -> None:
        store = market.conversations
        conv = store.open_or_get(buyer.id, provider.id)
        store.post_message(conv.id, buyer.id, "first")
        store.post_message(conv.id, buyer.id, "second")

        history = store.history(conv.id, provider.id)
        assert [m.content for m in history] == ["first", "second"]
        assert all(m.read and m.read_at is not None for m in history)

    def test_history_requires_participation(
        self, market: Marketplace, provider: User, buyer: User
    ) -> None:
        outsider = market.identity.register("Eve", "+22990000099", "secret9", "client")
        conv = market.conversations.open_or_get(buyer.id, provider.id)
        with pytest.raises(ForbiddenError):
            market.conversations.history(conv.id, outsider.id)


class TestSummaries:
    def test_most_recent_activity_first(
        self, market: Marketplace, provider: User, buyer: User, listing: Listing
    ) -> None:
        store = market.conversations
        other = market.identity.register("Chidi", "+22990000003", "secret3", "client")
        older = store.open_or_get(buyer.id, provider.id, listing.id)
        newer = store.open_or_get(other.id, provider.id)
        store.post_message(older.id, buyer.id, "ping")

        summaries = store.list_for_user(provider.id)
        assert [s.conversation.id for s in summaries] == [older.id, newer.id]
        top = summaries[0]
        assert top.other_user is buyer
        assert top.listing is listing
        assert top.last_message is not None and top.last_message.content == "ping"
        assert top.unread_count == 1
        assert summaries[1].last_message is None

    def test_unread_total(self, market: Marketplace, provider: User, buyer: User) -> None:
        store = market.conversations
        other = market.identity.register("Chidi", "+22990000003", "secret3", "client")
        a = store.open_or_get(buyer.id, provider.id)
        b = store.open_or_get(other.id, provider.id)
        store.post_message(a.id, buyer.id, "1")
        store.post_message(b.id, other.id, "2")
        store.post_message(b.id, other.id, "3")
        assert store.unread_total(provider.id) == 3
        assert store.unread_total(buyer.id) == 0
