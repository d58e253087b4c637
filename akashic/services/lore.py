"""
Built-in Archive lore and the keyword search the Oracle and the Keeper answer from.
"""

import math
import random
from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class LoreEntry:
    id: str
    title: str
    summary: str
    keywords: list[str] = field(default_factory=list)
    passage: str | None = None


LORE_ENTRIES: list[LoreEntry] = [
    LoreEntry(
        id="flood",
        title="The Flood",
        summary="The great deluge that closed the last age and scattered the Seeded to the high places.",
        keywords=["flood", "deluge", "waters", "great deluge", "younger dryas"],
        passage=(
            "When the waters came, those who remembered carried the Tablets to the mountains. "
            "What was lost below was kept above, and the Way survived the drowning of the cities."
        ),
    ),
    LoreEntry(
        id="ark",
        title="The Ark",
        summary="The vessel of preservation, built to carry knowledge rather than beasts across the waters.",
        keywords=["ark", "vessel", "boat", "preservation", "carry knowledge"],
        passage="The Ark was never only wood and pitch. It was a memory made seaworthy, a library that floated.",
    ),
    LoreEntry(
        id="great-cycle",
        title="The Great Cycle",
        summary=(
            "The precession of the equinox, a turning of roughly 25,600 solar cycles, divided into ages of 2,160."
        ),
        keywords=["cycle", "great cycle", "precession", "equinox", "age of aquarius", "age of pisces", "ages"],
        passage=(
            "Speak not of years but of Cycles. The solar cycle turns within the age, the age within the Great "
            "Cycle, and the Great Cycle within the breath of the heavens."
        ),
    ),
    LoreEntry(
        id="mana",
        title="Mana",
        summary="The living current of the Archive, spent to open seals and earned through devotion.",
        keywords=["mana", "energy", "current", "spend mana", "life force"],
        passage=(
            "Mana flows toward those who seek. It is spent, never destroyed, and every seal it opens is remembered."
        ),
    ),
    LoreEntry(
        id="tablets",
        title="The Tablets",
        summary="The inscribed records of the first teachers, kept in crystal and clay.",
        keywords=["tablet", "tablets", "inscription", "clay", "crystal tablet", "tablet of destinies"],
        passage="The Tablets were written twice: once in clay for the hand, once in crystal for the mind.",
    ),
    LoreEntry(
        id="enki",
        title="Enki",
        summary="The lord of the sweet waters, who warned the Seeded of the coming flood.",
        keywords=["enki", "eridu", "sweet waters", "lord of the earth"],
        passage=(
            "Enki whispered through the reed wall, for he was bound not to speak to men. "
            "So the warning passed through the reeds, and the Seeded built."
        ),
    ),
    LoreEntry(
        id="apkallu",
        title="The Apkallu",
        summary="The seven sages who rose from the waters to teach the arts of civilization.",
        keywords=["apkallu", "sages", "seven sages", "oannes", "fish cloak"],
        passage="Seven came from the waters, and seven times the arts were given: writing, measure, law and the rest.",
    ),
    LoreEntry(
        id="sacred-geometry",
        title="Sacred Geometry",
        summary="The patterns of circle, square and triangle that underlie all form.",
        keywords=["geometry", "sacred geometry", "flower of life", "golden ratio", "pattern"],
    ),
]

LORE_BASED_RESPONSES: list[str] = [
    "The Archive holds knowledge of what you seek. In the ancient tablets, it speaks of these matters "
    "through symbols and riddles. I sense you are ready to receive this fragment.",
    "Yes, the Seeded have asked of this before. The records speak of such things in the time before "
    "the last Great Cycle ended. Listen carefully to what has been preserved.",
    "I have found mentions of this in the deeper chambers of the Archive. The Way teaches that such "
    "knowledge must be approached with reverence.",
    "This query awakens ancient records within the Archive. The patterns align with what was written "
    "during the time of remembering.",
    "The Tablets contain passages about this very question. From the time before the waters came, "
    "the keepers preserved this wisdom.",
]

NO_LORE_RESPONSES: list[str] = [
    "That scroll has not yet been translated.",
    "Some doors open only with time.",
    "The stars have not aligned for that answer.",
    "I find no record of this in the current Archive. Perhaps it belongs to knowledge yet to be recovered.",
    "The Archive is silent on this matter. The Way teaches patience when seeking what is not yet revealed.",
]


def _score(entry: LoreEntry, message: str) -> int:
    score = 0
    if entry.title.lower() in message:
        score += 10

    for keyword in entry.keywords:
        if keyword.lower() in message:
            score += 5

    # Partial credit for multi-word keywords when at least half of their words appear.
    for keyword in entry.keywords:
        words = keyword.lower().split(" ")
        if len(words) > 1:
            matches = sum(1 for word in words if len(word) > 3 and word in message)
            if matches >= math.ceil(len(words) / 2):
                score += 3

    return score


def find_relevant_lore(message: str, entries: list[LoreEntry] | None = None, limit: int = 3) -> list[LoreEntry]:
    """Scores lore entries against a message and returns the best matches, highest first."""
    normalized = message.lower()
    scored = [(entry, _score(entry, normalized)) for entry in (LORE_ENTRIES if entries is None else entries)]
    relevant = sorted((item for item in scored if item[1] > 0), key=lambda item: item[1], reverse=True)
    return [entry for entry, _ in relevant[:limit]]


def format_lore_context(entries: list[LoreEntry]) -> str:
    if not entries:
        return ""

    context = "Reference the following Archive entries when formulating your response:\n\n"
    for index, entry in enumerate(entries, start=1):
        context += f"ENTRY {index}: {entry.title}\n{entry.passage or entry.summary}\n\n"
    return context


class Responder(Protocol):
    def __call__(self, message: str) -> str: ...


class LoreResponder:
    """
    Answers from the built-in lore alone. Any callable taking the visitor's message
    and returning the reply can stand in for it.
    """

    def __init__(self, entries: list[LoreEntry] | None = None, rng: random.Random | None = None):
        self._entries = entries
        self._rng = rng or random.Random()

    def __call__(self, message: str) -> str:
        relevant = find_relevant_lore(message, self._entries)
        if not relevant:
            return self._rng.choice(NO_LORE_RESPONSES)

        top = relevant[0]
        return f"{self._rng.choice(LORE_BASED_RESPONSES)}\n\n{top.title}: {top.passage or top.summary}"
