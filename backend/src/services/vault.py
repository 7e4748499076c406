"""Filesystem vault of Markdown notes carrying concept frontmatter."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import re
from typing import Any, Dict, List, Sequence, Tuple

import frontmatter

from ..models.note import ConceptNote
from .config import AppConfig, get_config
from .grouping import normalize_concepts

logger = logging.getLogger(__name__)

MAX_PATH_LENGTH = 256
MAX_NOTE_BYTES = 1_048_576
FORBIDDEN_PATH_CHARS = frozenset('<>:"|?*\\')
H1_PATTERN = re.compile(r"^\s*#\s+(.+)$", re.MULTILINE)
CONCEPTS_KEY = "concepts"

VaultNote = Dict[str, Any]


def validate_note_path(note_path: str) -> None:
    """Raise ValueError unless ``note_path`` is a relative ``.md`` path inside a vault."""
    if not note_path or len(note_path) > MAX_PATH_LENGTH:
        raise ValueError(f"Note path must be 1-{MAX_PATH_LENGTH} characters")
    if Path(note_path).suffix != ".md":
        raise ValueError("Note path must end with .md")
    if note_path.startswith("/") or ".." in note_path.split("/"):
        raise ValueError("Note path must stay inside the vault")
    if FORBIDDEN_PATH_CHARS.intersection(note_path):
        raise ValueError("Note path contains invalid characters")


def sanitize_path(user_id: str, vault_root: Path, note_path: str) -> Path:
    """Absolute location of ``note_path``; ValueError if it resolves outside the user's vault."""
    user_root = (vault_root / user_id).resolve()
    target = (user_root / note_path).resolve()
    if target != user_root and user_root not in target.parents:
        raise ValueError(f"Path escapes vault root: {note_path}")
    return target


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def read_concepts(metadata: Dict[str, Any]) -> Tuple[str, ...]:
    """Concept labels from frontmatter; anything but a list of strings counts as none."""
    raw = metadata.get(CONCEPTS_KEY)
    if not isinstance(raw, list):
        return ()
    return normalize_concepts(item for item in raw if isinstance(item, str))


def _check_concepts_field(metadata: Dict[str, Any]) -> None:
    concepts = metadata.get(CONCEPTS_KEY)
    if concepts is None:
        return
    if not isinstance(concepts, list) or not all(isinstance(c, str) for c in concepts):
        raise ValueError("Field 'concepts' must be a list of strings")


def derive_title(note_path: str, metadata: Dict[str, Any], body: str) -> str:
    """Frontmatter title, else the first H1, else the file name."""
    title = metadata.get("title")
    if isinstance(title, str) and title.strip():
        return title.strip()
    heading = H1_PATTERN.search(body or "")
    if heading:
        return heading.group(1).strip()
    stem = Path(note_path).stem
    return stem.replace("-", " ").replace("_", " ").strip() or stem


class VaultService:
    """Reads and writes a user's notes; the concept map only ever reads."""

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or get_config()
        self.vault_root = self.config.vault_base_path
        self.vault_root.mkdir(parents=True, exist_ok=True)

    def initialize_vault(self, user_id: str) -> Path:
        """Create the user's vault directory if needed and return it."""
        user_root = (self.vault_root / user_id).resolve()
        user_root.mkdir(parents=True, exist_ok=True)
        return user_root

    def resolve_note_path(self, user_id: str, note_path: str) -> Path:
        validate_note_path(note_path)
        return sanitize_path(user_id, self.vault_root, note_path)

    def read_note(self, user_id: str, note_path: str) -> VaultNote:
        """
        Load one note.

        Raises FileNotFoundError for a missing note and ValueError for a path
        that is not allowed.
        """
        location = self.resolve_note_path(user_id, note_path)
        if not location.is_file():
            raise FileNotFoundError(f"Note not found: {note_path}")
        post = frontmatter.load(location)
        return self._payload(note_path, dict(post.metadata or {}), post.content or "", location)

    def write_note(
        self,
        user_id: str,
        note_path: str,
        *,
        title: str | None = None,
        concepts: Sequence[str] | None = None,
        metadata: Dict[str, Any] | None = None,
        body: str,
    ) -> VaultNote:
        """Create or overwrite a note; ``created`` survives rewrites."""
        location = self.resolve_note_path(user_id, note_path)
        body = body or ""
        if len(body.encode("utf-8")) > MAX_NOTE_BYTES:
            raise ValueError("Note exceeds 1 MiB limit")

        fields: Dict[str, Any] = dict(metadata or {})
        if concepts is not None:
            fields[CONCEPTS_KEY] = list(concepts)
        _check_concepts_field(fields)

        if location.exists():
            created = frontmatter.load(location).metadata.get("created")
            if isinstance(created, str):
                fields.setdefault("created", created)

        fields["title"] = title or fields.get("title") or derive_title(note_path, fields, body)
        timestamp = _now()
        fields.setdefault("created", timestamp)
        fields["updated"] = timestamp

        location.parent.mkdir(parents=True, exist_ok=True)
        location.write_text(frontmatter.dumps(frontmatter.Post(body, **fields)), encoding="utf-8")
        logger.debug(
            "Note written",
            extra={"user_id": user_id, "path": note_path, "concepts": len(read_concepts(fields))},
        )
        return self._payload(note_path, fields, body, location)

    def set_concepts(self, user_id: str, note_path: str, concepts: Sequence[str]) -> VaultNote:
        """Replace a note's concept list, keeping its body and other metadata."""
        note = self.read_note(user_id, note_path)
        metadata = dict(note["metadata"])
        metadata.pop("updated", None)
        return self.write_note(
            user_id,
            note_path,
            concepts=list(normalize_concepts(concepts)),
            metadata=metadata,
            body=note["body"],
        )

    def list_notes(self, user_id: str) -> List[Dict[str, Any]]:
        """Every readable note with its title, concepts and mtime, sorted by path."""
        user_root = (self.vault_root / user_id).resolve()
        if not user_root.is_dir():
            return []
        listing: List[Dict[str, Any]] = []
        for location in user_root.rglob("*.md"):
            if not location.is_file():
                continue
            relative = location.relative_to(user_root).as_posix()
            try:
                post = frontmatter.load(location)
            except Exception as exc:
                logger.warning(
                    "Skipping unreadable note",
                    extra={"user_id": user_id, "path": relative, "error": str(exc)},
                )
                continue
            metadata = dict(post.metadata or {})
            body = post.content or ""
            listing.append(
                {
                    "path": relative,
                    "title": derive_title(relative, metadata, body),
                    "concepts": list(read_concepts(metadata)),
                    "body": body,
                    "last_modified": datetime.fromtimestamp(
                        location.stat().st_mtime, tz=timezone.utc
                    ),
                }
            )
        listing.sort(key=lambda item: item["path"].lower())
        return listing

    def load_concept_notes(self, user_id: str) -> Tuple[ConceptNote, ...]:
        """Immutable note snapshot for the concept map, in listing order."""
        return tuple(
            ConceptNote(
                id=item["path"],
                title=item["title"],
                content=item["body"],
                concepts=item["concepts"],
            )
            for item in self.list_notes(user_id)
        )

    def _payload(
        self, note_path: str, metadata: Dict[str, Any], body: str, location: Path
    ) -> VaultNote:
        stat = location.stat()
        return {
            "path": note_path,
            "title": derive_title(note_path, metadata, body),
            "metadata": metadata,
            "concepts": list(read_concepts(metadata)),
            "body": body,
            "size_bytes": stat.st_size,
            "modified": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            "absolute_path": location,
        }


__all__ = ["VaultService", "VaultNote", "validate_note_path", "sanitize_path", "read_concepts"]
