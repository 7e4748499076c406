"""Per-user concept map sessions: note snapshot, layout, edges and view state."""

from __future__ import annotations

from collections import OrderedDict
import logging
from typing import Dict, List, Optional, Tuple

from ..models.concept_map import (
    ConceptMapFrame,
    ConceptNode,
    Connection,
    FrameConnection,
    FrameNode,
    Group,
    InteractionEvent,
    LayoutResult,
    LayoutSettings,
    ViewMode,
    ViewTransform,
)
from ..models.note import ConceptNote
from .config import get_config
from .connection_loader import ConnectionLoader, SuggestFn
from .grouping import derive_groups
from .interaction import InteractionController
from .layout import compute_layout
from .relationship_suggester import get_relationship_suggester
from .vault import VaultService

logger = logging.getLogger(__name__)

MAX_SESSIONS = 256


class ConceptMapError(Exception):
    """Raised when an interaction targets something that is not on the map."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GroupNotFoundError(ConceptMapError):
    pass


class NodeNotFoundError(ConceptMapError):
    pass


class ConceptMapSession:
    """
    One user's concept map.

    The layout is a pure function of the note snapshot and the expanded group,
    so it is recomputed (or served from cache) on demand and never patched.
    """

    def __init__(self, user_id: str, suggest: SuggestFn, settings: LayoutSettings) -> None:
        self.user_id = user_id
        self.settings = settings
        self.controller = InteractionController()
        self.loader = ConnectionLoader(suggest)
        self._notes: Tuple[ConceptNote, ...] = ()

    @property
    def notes(self) -> Tuple[ConceptNote, ...]:
        return self._notes

    def groups(self) -> List[Group]:
        return derive_groups(self._notes, self.settings.palette)

    def layout(self) -> LayoutResult:
        expanded = (
            self.controller.expanded_group
            if self.controller.mode is ViewMode.EXPANDED
            else None
        )
        return compute_layout(self._notes, expanded, self.settings)

    def set_notes(self, notes: Tuple[ConceptNote, ...]) -> bool:
        """Swap in a new snapshot; returns False when nothing changed."""
        notes = tuple(notes)
        if notes == self._notes:
            return False
        self._notes = notes
        self.loader.invalidate()

        expanded = self.controller.expanded_group
        if expanded is not None and all(group.key != expanded for group in self.groups()):
            logger.info(
                "Expanded group disappeared; returning to overview",
                extra={"user_id": self.user_id, "group": expanded},
            )
            self.controller.collapse()
        self._forget_missing_nodes()
        return True

    async def load_connections(self) -> Optional[List[Connection]]:
        return await self.loader.sweep(self.groups())

    async def refresh(self, notes: Tuple[ConceptNote, ...]) -> ConceptMapFrame:
        self.set_notes(notes)
        await self.load_connections()
        return self.frame()

    def apply(self, event: InteractionEvent) -> ConceptMapFrame:
        """Validate the event's target against the current map, then dispatch it."""
        if event.type == "expand" and self.controller.mode is ViewMode.OVERVIEW:
            if all(group.key != event.group_key for group in self.groups()):
                raise GroupNotFoundError(f"Group not found: {event.group_key}")
        if event.type in {"select", "hover"} and event.node_key is not None:
            if all(node.key != event.node_key for node in self.layout().nodes):
                raise NodeNotFoundError(f"Concept not found: {event.node_key}")

        self.controller.dispatch(event)
        return self.frame()

    def _forget_missing_nodes(self) -> None:
        self.controller.clear_missing({node.key for node in self.layout().nodes})

    def _render_connections(
        self, nodes: Tuple[ConceptNode, ...]
    ) -> List[Tuple[Connection, ConceptNode, ConceptNode]]:
        by_identity: Dict[Tuple[str, str], ConceptNode] = {
            (node.note_id, node.label): node for node in nodes
        }
        rendered = []
        for connection in self.loader.connections:
            source = by_identity.get((connection.note_id, connection.from_label))
            target = by_identity.get((connection.note_id, connection.to_label))
            if source is None or target is None or source.key == target.key:
                continue
            rendered.append((connection, source, target))
        return rendered

    def frame(self) -> ConceptMapFrame:
        """Project the current layout, edges and view state for the renderer."""
        layout = self.layout()
        state = self.controller.state
        edges = self._render_connections(layout.nodes)
        edge_keys = [(source.key, target.key) for _, source, target in edges]

        frame_connections = [
            FrameConnection(
                connection=connection,
                from_key=source.key,
                to_key=target.key,
                x1=source.x,
                y1=source.y,
                x2=target.x,
                y2=target.y,
                highlighted=self.controller.is_edge_highlighted(source.key, target.key),
                dimmed=self.controller.is_edge_dimmed(source.key, target.key),
            )
            for connection, source, target in edges
        ]
        frame_nodes = [
            FrameNode(
                node=node,
                selected=node.key == state.selected,
                hovered=node.key == state.hovered,
                dimmed=self.controller.is_node_dimmed(node, edge_keys),
            )
            for node in layout.nodes
        ]

        return ConceptMapFrame(
            mode=state.mode,
            expanded_group=state.expanded_group,
            canvas_width=self.settings.canvas_width,
            canvas_height=self.settings.canvas_height,
            clusters=list(layout.groups) if state.mode is ViewMode.OVERVIEW else [],
            nodes=frame_nodes,
            connections=frame_connections,
            transform=ViewTransform(pan_x=state.pan_x, pan_y=state.pan_y, zoom=state.zoom),
            selected=state.selected,
            hovered=state.hovered,
            empty=not layout.nodes,
        )


class SessionRegistry:
    """In-process map of user id to session, evicting the least recently used."""

    def __init__(
        self,
        vault_service: VaultService,
        suggest: SuggestFn,
        settings: LayoutSettings,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        self.vault_service = vault_service
        self.suggest = suggest
        self.settings = settings
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, ConceptMapSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, user_id: str) -> ConceptMapSession:
        session = self._sessions.get(user_id)
        if session is not None:
            self._sessions.move_to_end(user_id)
            return session
        session = ConceptMapSession(user_id, self.suggest, self.settings)
        self._sessions[user_id] = session
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.debug("Evicted concept map session", extra={"user_id": evicted})
        return session

    def sync(self, user_id: str) -> ConceptMapSession:
        """Return the user's session with the latest note snapshot applied."""
        session = self.get(user_id)
        if session.set_notes(self.vault_service.load_concept_notes(user_id)):
            logger.info(
                "Note snapshot changed",
                extra={"user_id": user_id, "notes": len(session.notes)},
            )
        return session

    async def refresh(self, user_id: str) -> ConceptMapFrame:
        session = self.get(user_id)
        return await session.refresh(self.vault_service.load_concept_notes(user_id))


_registry: SessionRegistry | None = None


def get_session_registry() -> SessionRegistry:
    """Get or create the session registry singleton."""
    global _registry
    if _registry is None:
        config = get_config()
        _registry = SessionRegistry(
            vault_service=VaultService(config=config),
            suggest=get_relationship_suggester().suggest_connections,
            settings=config.layout_settings(),
        )
    return _registry


__all__ = [
    "ConceptMapSession",
    "SessionRegistry",
    "ConceptMapError",
    "GroupNotFoundError",
    "NodeNotFoundError",
    "get_session_registry",
]
