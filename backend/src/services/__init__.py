"""Service layer for business logic and external integrations."""

from .bubble_sizing import bubble_size
from .collision import Body, resolve_collisions
from .concept_map_service import (
    ConceptMapError,
    ConceptMapSession,
    GroupNotFoundError,
    NodeNotFoundError,
    SessionRegistry,
    get_session_registry,
)
from .config import AppConfig, get_config, reload_config
from .connection_loader import ConnectionLoader, load_connections, load_group_connections
from .grouping import derive_groups, normalize_concepts
from .interaction import InteractionController
from .layout import compute_layout, layout_expanded, layout_overview
from .relationship_suggester import (
    RelationshipSuggester,
    RelationshipSuggesterError,
    get_relationship_suggester,
)
from .vault import VaultNote, VaultService, sanitize_path, validate_note_path

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "VaultService",
    "VaultNote",
    "sanitize_path",
    "validate_note_path",
    "derive_groups",
    "normalize_concepts",
    "bubble_size",
    "Body",
    "resolve_collisions",
    "compute_layout",
    "layout_overview",
    "layout_expanded",
    "InteractionController",
    "ConnectionLoader",
    "load_connections",
    "load_group_connections",
    "RelationshipSuggester",
    "RelationshipSuggesterError",
    "get_relationship_suggester",
    "ConceptMapSession",
    "SessionRegistry",
    "ConceptMapError",
    "GroupNotFoundError",
    "NodeNotFoundError",
    "get_session_registry",
]
