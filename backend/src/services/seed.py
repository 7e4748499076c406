"""Seed a demo vault with notes that already carry concepts."""

from __future__ import annotations

import logging

from .config import AppConfig, get_config
from .vault import VaultService

logger = logging.getLogger(__name__)

DEMO_NOTES = [
    {
        "path": "Understanding Memory.md",
        "title": "Understanding Memory",
        "concepts": ["Working Memory", "Long-term Memory", "Encoding", "Consolidation"],
        "body": """# Understanding Memory

Information first lands in working memory, which holds only a handful of items.
Encoding moves it toward long-term memory, and consolidation during rest makes
the trace durable.""",
    },
    {
        "path": "Learning Techniques.md",
        "title": "Learning Techniques",
        "concepts": [
            "Spaced Repetition",
            "Retrieval Practice",
            "Interleaving",
            "Elaboration",
            "Chunking",
        ],
        "body": """# Learning Techniques

Spacing reviews out over days beats cramming. Retrieving an answer from memory
strengthens it more than re-reading, and interleaving topics helps transfer.""",
    },
    {
        "path": "biology/Photosynthesis.md",
        "title": "Photosynthesis",
        "concepts": ["Photosynthesis", "Chlorophyll", "Sunlight"],
        "body": """# Photosynthesis

Chlorophyll absorbs sunlight and drives the conversion of water and carbon
dioxide into glucose and oxygen.""",
    },
    {
        "path": "Metacognition.md",
        "title": "Metacognition",
        "concepts": ["Metacognition"],
        "body": """# Metacognition

Thinking about your own thinking: noticing what you know and what you don't.""",
    },
]


def seed_demo_vault(user_id: str, config: AppConfig | None = None) -> int:
    """
    Write the demo notes into ``user_id``'s vault if it is empty.

    Returns the number of notes created.
    """
    vault_service = VaultService(config=config)
    if vault_service.list_notes(user_id):
        logger.info("Vault already contains notes; skipping demo seed", extra={"user_id": user_id})
        return 0

    notes_created = 0
    for note_data in DEMO_NOTES:
        try:
            vault_service.write_note(
                user_id,
                note_data["path"],
                title=note_data["title"],
                concepts=note_data["concepts"],
                body=note_data["body"],
            )
            notes_created += 1
        except (OSError, ValueError) as e:
            logger.error(f"Failed to create demo note {note_data['path']}: {e}")

    logger.info(f"Seeded {notes_created} demo notes for user: {user_id}")
    return notes_created


def init_and_seed(config: AppConfig | None = None) -> None:
    """Seed the default user's vault on startup when enabled."""
    config = config or get_config()
    if not config.seed_demo_vault:
        logger.info("Demo seeding disabled")
        return
    seed_demo_vault(config.default_user_id, config=config)


__all__ = ["seed_demo_vault", "init_and_seed", "DEMO_NOTES"]
