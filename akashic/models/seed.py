import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .catalog import Scroll, ScrollType
from .crafting import CraftingRecipe
from .inventory import ItemType, Rarity
from .ledger import ManaPackage

logger = logging.getLogger(__name__)

# --- STATIC DATA DEFINITIONS ---

# 1. T_Scroll Seed Data: the opening catalog of the Archive
# Structure: (title, ScrollType, is_locked, unlock_key, image, content)
SCROLLS_SEED_DATA: list[tuple[str, ScrollType, bool, str, str, str]] = [
    (
        "Origins",
        ScrollType.TABLET,
        False,
        "origins",
        "/assets/ancient_tablet_dark.png",
        "The first tablet of creation, revealing how the world began and the first emergence of consciousness. "
        "The primordial waters stirred with potential, and from the depths arose the first patterns of existence.",
    ),
    (
        "The Path",
        ScrollType.SCROLL,
        False,
        "path",
        "/assets/ancient_tablet_cracked.png",
        "Guidance for the seeker on the journey through the labyrinth of consciousness and awakening. "
        "Those who walk with awareness find that the journey itself transforms them.",
    ),
    (
        "Sacred Geometry",
        ScrollType.BOOK,
        False,
        "geometry",
        "/assets/sacred_symbol.png",
        "The underlying patterns that connect all life and form the foundation of the universe. "
        "In the perfect dance of circle, square, and triangle lies the blueprint of creation.",
    ),
    (
        "Legacy of the Lost Age",
        ScrollType.TABLET,
        False,
        "lost-age",
        "/assets/ancient_tablet_dark.png",
        "Many ancient cultures share flood myths coinciding with the dawn of civilization. "
        "Archaeological evidence from Eridu shows eighteen superimposed temples built over millennia.",
    ),
    (
        "The Flood",
        ScrollType.SCROLL,
        False,
        "deluge",
        "/assets/great_flood.png",
        "Chronicles of the great deluge that changed the course of humanity and ushered in a new age. "
        "Those who remembered the sacred knowledge retreated to high places, preserving the wisdom.",
    ),
    (
        "Celestial Cycles",
        ScrollType.ARTIFACT,
        True,
        "celestial",
        "/assets/ancient_city.png",
        "The movements of the heavenly bodies and their influence on the Great Cycle of existence. "
        "As above, so below: the cosmic dance of planets and stars reflects the rhythms of consciousness.",
    ),
    (
        "Inner Alchemy",
        ScrollType.SCROLL,
        True,
        "WISDOM",
        "/assets/crystal_tablet.png",
        "Transformative practices to transmute consciousness and achieve inner illumination. "
        "The Great Work begins within.",
    ),
]

# 2. T_ManaPackage Seed Data
# Structure: (name, description, amount, price_in_cents)
MANA_PACKAGES_SEED_DATA: list[tuple[str, str, int, int]] = [
    ("Novice Pack", "A small amount of Mana to unlock basic scrolls and features.", 100, 499),
    ("Adept Pack", "A moderate amount of Mana for regular Archive users.", 300, 999),
    ("Scholar Pack", "A substantial amount of Mana for dedicated seekers of knowledge.", 1000, 2499),
    ("Master Pack", "An abundant reserve of Mana for the most devoted students of the Archive.", 2500, 4999),
]

# 3. Item templates. Keys match InventoryItem columns.
CRYSTAL_COLLECTION: list[dict[str, Any]] = [
    {
        "name": "Quartz Crystal",
        "description": "A clear quartz crystal known for its amplifying energy.",
        "type": ItemType.CRYSTAL,
        "image_url": "/assets/crystals/quartz.png",
        "rarity": Rarity.COMMON,
        "attributes": {"energy": "amplifying", "element": "universal"},
    },
    {
        "name": "Fire Crystal",
        "description": "A vibrant red crystal that emanates warmth.",
        "type": ItemType.CRYSTAL,
        "image_url": "/assets/crystals/fire.png",
        "rarity": Rarity.UNCOMMON,
        "attributes": {"energy": "transformative", "element": "fire"},
    },
    {
        "name": "Green Crystal",
        "description": "An emerald-green crystal connected to growth and healing.",
        "type": ItemType.CRYSTAL,
        "image_url": "/assets/crystals/green.png",
        "rarity": Rarity.UNCOMMON,
        "attributes": {"energy": "healing", "element": "earth"},
    },
    {
        "name": "Blue Cluster Crystal",
        "description": "A cluster of blue crystals that vibrate with communicative energy.",
        "type": ItemType.CRYSTAL,
        "image_url": "/assets/crystals/blue_cluster.png",
        "rarity": Rarity.RARE,
        "attributes": {"energy": "communicative", "element": "water", "form": "cluster"},
    },
    {
        "name": "Sky Blue Crystal",
        "description": "A translucent sky-blue crystal that connects to higher realms of consciousness.",
        "type": ItemType.CRYSTAL,
        "image_url": "/assets/crystals/sky_blue.png",
        "rarity": Rarity.RARE,
        "attributes": {"energy": "elevating", "element": "air"},
    },
    {
        "name": "Obsidian Crystal",
        "description": "A dark, protective stone formed from volcanic glass.",
        "type": ItemType.CRYSTAL,
        "image_url": "/assets/crystals/obsidian.png",
        "rarity": Rarity.UNCOMMON,
        "attributes": {"energy": "protective", "element": "earth", "origin": "volcanic"},
    },
]

# Granted once, at registration.
STARTER_ITEMS: list[dict[str, Any]] = [
    {
        "name": "Crystal Tablet of Enki",
        "description": "An ancient crystalline tablet inscribed with the wisdom of Enki.",
        "type": ItemType.TABLET,
        "image_url": "/assets/crystal_tablet.png",
        "rarity": Rarity.RARE,
        "quantity": 1,
        "attributes": {"power": "wisdom", "origin": "Sumerian"},
    },
    {
        "name": "Book of the Apkallu",
        "description": "A sacred text detailing the knowledge brought by the seven sages.",
        "type": ItemType.BOOK,
        "image_url": "/assets/book_apkallu.png",
        "rarity": Rarity.UNCOMMON,
        "quantity": 1,
        "attributes": {"knowledge": "cosmic", "language": "ancient"},
    },
    {
        "name": "Crystal Fragment",
        "description": "A small shard of luminous crystal that resonates with mysterious energy.",
        "type": ItemType.ARTIFACT,
        "image_url": "/assets/crystal_fragment.png",
        "rarity": Rarity.COMMON,
        "quantity": 3,
        "attributes": {"energy": "resonant", "use": "ritual component"},
    },
    {**CRYSTAL_COLLECTION[0], "quantity": 1},
]

# 4. T_CraftingRecipe Seed Data
CRAFTING_RECIPES_SEED_DATA: list[dict[str, Any]] = [
    {
        "name": "Resonant Amulet",
        "description": "Bind crystal fragments around a quartz core.",
        "ingredients": [
            {"item_name": "Crystal Fragment", "quantity": 2},
            {"item_name": "Quartz Crystal", "quantity": 1},
        ],
        "crafting_time_minutes": 5,
        "is_public": True,
        "result_item_name": "Resonant Amulet",
        "result_item_description": "An amulet that hums softly when scrolls are near.",
        "result_item_type": ItemType.AMULET,
        "result_item_rarity": Rarity.UNCOMMON,
        "result_item_quantity": 1,
        "result_item_attributes": {"energy": "resonant"},
    },
    {
        "name": "Elixir of Remembrance",
        "description": "Dissolve a crystal fragment in fire-warmed water.",
        "ingredients": [
            {"item_name": "Crystal Fragment", "quantity": 1},
            {"item_name": "Fire Crystal", "quantity": 1},
        ],
        "crafting_time_minutes": 10,
        "is_public": True,
        "result_item_name": "Elixir of Remembrance",
        "result_item_description": "A draught that brings forgotten glyphs back to mind.",
        "result_item_type": ItemType.ELIXIR,
        "result_item_rarity": Rarity.RARE,
        "result_item_quantity": 1,
        "result_item_attributes": {"uses": 1},
    },
    {
        "name": "Codex of the Seven Sages",
        "description": "Unite the tablet of Enki with the book of the Apkallu.",
        "ingredients": [
            {"item_name": "Crystal Tablet of Enki", "quantity": 1},
            {"item_name": "Book of the Apkallu", "quantity": 1},
        ],
        "crafting_time_minutes": 30,
        "is_public": False,
        "result_item_name": "Codex of the Seven Sages",
        "result_item_description": "The combined wisdom of creation and the sages.",
        "result_item_type": ItemType.CODEX,
        "result_item_rarity": Rarity.LEGENDARY,
        "result_item_quantity": 1,
        "result_item_attributes": {"knowledge": "complete"},
    },
]

# --- SEEDING FUNCTIONS ---


async def _is_empty(session: AsyncSession, model: type) -> bool:
    return not await session.scalar(select(func.count()).select_from(model))


async def initialize_scrolls(session: AsyncSession) -> int:
    """
    Initializes the T_Scroll table with the default catalog.
    Skipped entirely when any scroll already exists, to avoid duplicates.
    """
    if not await _is_empty(session, Scroll):
        logger.info("Scrolls already initialized, skipping")
        return 0

    for title, scroll_type, is_locked, key, image, content in SCROLLS_SEED_DATA:
        session.add(
            Scroll(title=title, type=scroll_type, is_locked=is_locked, unlock_key=key, image=image, content=content)
        )
        logger.info("Created scroll %r (%s, locked=%s)", title, scroll_type.value, is_locked)

    await session.flush()
    return len(SCROLLS_SEED_DATA)


async def initialize_mana_packages(session: AsyncSession) -> int:
    if not await _is_empty(session, ManaPackage):
        logger.info("Mana packages already initialized, skipping")
        return 0

    for name, description, amount, price in MANA_PACKAGES_SEED_DATA:
        session.add(ManaPackage(name=name, description=description, amount=amount, price=price, is_active=True))

    await session.flush()
    logger.info("Created %d default Mana packages", len(MANA_PACKAGES_SEED_DATA))
    return len(MANA_PACKAGES_SEED_DATA)


async def initialize_crafting_recipes(session: AsyncSession) -> int:
    if not await _is_empty(session, CraftingRecipe):
        logger.info("Crafting recipes already initialized, skipping")
        return 0

    session.add_all(CraftingRecipe(**data) for data in CRAFTING_RECIPES_SEED_DATA)
    await session.flush()
    logger.info("Created %d default crafting recipes", len(CRAFTING_RECIPES_SEED_DATA))
    return len(CRAFTING_RECIPES_SEED_DATA)


async def run_seeding(session: AsyncSession) -> None:
    """
    The main entry point to execute all seeding functions. Idempotent; commits once.
    """
    logger.info("Starting database seeding")
    try:
        await initialize_scrolls(session)
        await initialize_mana_packages(session)
        await initialize_crafting_recipes(session)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.error("Seeding failed due to an integrity error; transaction rolled back")
        raise
    logger.info("All default Archive data is in place")
