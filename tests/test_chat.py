from datetime import date

import pytest

from akashic.exceptions import DailyLimitReached, InsufficientBalance
from akashic.models.messages import ChatChannel
from akashic.services.lore import (
    LORE_BASED_RESPONSES,
    NO_LORE_RESPONSES,
    LoreEntry,
    LoreResponder,
    find_relevant_lore,
    format_lore_context,
)

TODAY = date(2026, 3, 20)


class TestLoreSearch:
    """Keyword scoring over the built-in lore."""

    def test_title_outranks_keywords(self):
        entries = [
            LoreEntry(id="a", title="Mana", summary="", keywords=["current"]),
            LoreEntry(id="b", title="Current Affairs", summary="", keywords=["mana"]),
        ]

        # "a": title +10; "b": keyword +5.
        assert [e.id for e in find_relevant_lore("Tell me about mana", entries)] == ["a", "b"]

    def test_multi_word_keyword_partial_match(self):
        entry = LoreEntry(id="c", title="Cycle", summary="", keywords=["great precession"])

        # "precession" alone is half of the phrase: +3, no full keyword match.
        assert find_relevant_lore("what is precession?", [entry]) == [entry]
        assert find_relevant_lore("nothing relevant here", [entry]) == []

    def test_short_words_do_not_count_toward_partial_match(self):
        entry = LoreEntry(id="d", title="Zz", summary="", keywords=["age of glass"])

        assert find_relevant_lore("the age", [entry]) == []

    def test_at_most_three_results(self):
        assert len(find_relevant_lore("the flood, the ark, the tablets, enki and the apkallu")) == 3

    def test_format_context(self):
        entries = find_relevant_lore("Who was Enki?")

        context = format_lore_context(entries)

        assert context.startswith("Reference the following Archive entries")
        assert "ENTRY 1: Enki" in context
        assert format_lore_context([]) == ""


class TestLoreResponder:
    """Replies are composed from lore alone."""

    def test_no_lore_reply(self, responder):
        assert responder("zzz qqq") in NO_LORE_RESPONSES

    def test_lore_reply_cites_best_entry(self):
        reply = LoreResponder()("Tell me of the great deluge")

        opening, _, body = reply.partition("\n\n")
        assert opening in LORE_BASED_RESPONSES
        assert body.startswith("The Flood:")


class TestOracle:
    """Anonymous visitors get free daily consultations; members pay Mana."""

    async def test_anonymous_daily_limit(self, services, settings):
        for _ in range(settings.oracle_free_daily):
            await services.chat.consult_oracle("visitor-1", "What is the Great Cycle?", today=TODAY)

        with pytest.raises(DailyLimitReached) as excinfo:
            await services.chat.consult_oracle("visitor-1", "One more?", today=TODAY)

        assert excinfo.value.extra == {"requires_mana": True}
        # The limit is per day and per chat session.
        await services.chat.consult_oracle("visitor-1", "A new day", today=date(2026, 3, 21))
        await services.chat.consult_oracle("visitor-2", "Another seeker", today=TODAY)

    async def test_member_pays_per_consultation(self, services, user_id):
        await services.chat.consult_oracle(str(user_id), "Speak of Mana", user_id=user_id, today=TODAY)

        assert await services.ledger.get_balance(user_id) == 45
        latest = (await services.ledger.list_transactions(user_id, limit=1))[0]
        assert latest.description == "Oracle consultation"
        assert latest.amount == -5

    async def test_member_without_mana_is_refused_and_nothing_stored(self, services, user_id):
        await services.ledger.spend(user_id, 48, "Almost everything")

        with pytest.raises(InsufficientBalance):
            await services.chat.consult_oracle("member", "Speak", user_id=user_id, today=TODAY)

        assert await services.chat.history(ChatChannel.ORACLE, "member") == []
        assert await services.ledger.get_balance(user_id) == 2

    async def test_both_sides_are_stored_in_order(self, services):
        user_message, reply = await services.chat.consult_oracle("visitor-3", "Who were the Apkallu?", today=TODAY)

        history = await services.chat.history(ChatChannel.ORACLE, "visitor-3")
        assert [m.id for m in history] == [user_message.id, reply.id]
        assert [m.is_user for m in history] == [True, False]
        assert history[0].content == "Who were the Apkallu?"


class TestKeeper:
    """The Keeper answers for free."""

    async def test_keeper_exchange(self, services):
        await services.chat.ask_keeper("visitor-4", "Tell me of the Tablets")

        history = await services.chat.history("keeper", "visitor-4")
        assert len(history) == 2
        assert await services.chat.history(ChatChannel.ORACLE, "visitor-4") == []
