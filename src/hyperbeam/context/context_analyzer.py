"""
Project context gathering for assistant requests.

The hosting editor implements :class:`ProjectIntrospector`; the analyzer wraps
it so a misbehaving host can never break a request.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

from src.hyperbeam.config import UNKNOWN_PROJECT_NAME
from src.hyperbeam.models.context_snapshot import ContextSnapshot, EditorState
from src.hyperbeam.prompts.prompt_builder import build_context_summary

logger = logging.getLogger(__name__)

# Node types offered to the model when it asks what the engine provides.
AVAILABLE_NODES: List[str] = [
    "Node",
    "Node2D",
    "Node3D",
    "Control",
    "RigidBody2D",
    "CharacterBody2D",
]

AVAILABLE_METHODS: Dict[str, List[str]] = {
    "Node": ["_ready()", "_process(delta)", "get_node(path)", "queue_free()"],
}


class ProjectIntrospector(Protocol):
    """What the hosting editor must provide to describe its project."""

    def snapshot_project(self) -> ContextSnapshot:
        ...

    def snapshot_editor(self) -> EditorState:
        ...


class NullProjectIntrospector:
    """Introspector for hosts that expose no project information."""

    def snapshot_project(self) -> ContextSnapshot:
        return ContextSnapshot()

    def snapshot_editor(self) -> EditorState:
        return EditorState()


class ContextAnalyzer:
    """Produces a fresh ContextSnapshot for every request."""

    def __init__(self, introspector: Optional[ProjectIntrospector] = None) -> None:
        self.introspector = introspector or NullProjectIntrospector()

    def analyze_current_project(self) -> ContextSnapshot:
        """
        Capture the project and editor state right now.

        Never raises: any failure of the host yields the documented defaults
        (empty file sets, ``"Unknown"`` project name, no open scene or script).
        """
        project = self._safe_project_snapshot()
        editor = self._safe_editor_snapshot()
        return project.with_editor_state(editor)

    def get_context_summary(self, snapshot: Optional[ContextSnapshot] = None) -> str:
        """Describe the project, and the open scene and script when known."""
        return build_context_summary(snapshot or self.analyze_current_project())

    def get_relevant_documentation(self, topic: str) -> str:
        return f"Documentation for: {topic}"

    def get_available_nodes(self) -> List[str]:
        return list(AVAILABLE_NODES)

    def get_available_methods(self, class_name: str) -> List[str]:
        return list(AVAILABLE_METHODS.get(class_name, []))

    def _safe_project_snapshot(self) -> ContextSnapshot:
        try:
            snapshot = self.introspector.snapshot_project()
        except Exception:
            logger.warning("Project introspection failed; using an empty snapshot.", exc_info=True)
            return ContextSnapshot()
        if not isinstance(snapshot, ContextSnapshot):
            logger.debug("Introspector returned %r instead of a ContextSnapshot.", type(snapshot).__name__)
            return ContextSnapshot()
        if not snapshot.project_name.strip():
            return snapshot.model_copy(update={"project_name": UNKNOWN_PROJECT_NAME})
        return snapshot

    def _safe_editor_snapshot(self) -> EditorState:
        try:
            editor = self.introspector.snapshot_editor()
        except Exception:
            logger.warning("Editor introspection failed; assuming nothing is open.", exc_info=True)
            return EditorState()
        return editor if isinstance(editor, EditorState) else EditorState()
