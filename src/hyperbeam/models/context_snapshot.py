from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.hyperbeam.config import UNKNOWN_PROJECT_NAME


class EditorState(BaseModel):
    """Scene and script currently open in the editor, when known."""

    model_config = ConfigDict(frozen=True)

    current_scene: Optional[str] = None
    current_script: Optional[str] = None


class ContextSnapshot(BaseModel):
    """Point-in-time summary of the project being edited.

    Attributes:
        project_name: Configured project name, ``"Unknown"`` when unavailable.
        scene_files: Known scene file paths.
        script_files: Known script file paths.
        current_scene: Scene open in the editor, if any.
        current_script: Script open in the editor, if any.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = UNKNOWN_PROJECT_NAME
    scene_files: FrozenSet[str] = Field(default_factory=frozenset)
    script_files: FrozenSet[str] = Field(default_factory=frozenset)
    current_scene: Optional[str] = None
    current_script: Optional[str] = None

    def with_editor_state(self, editor: EditorState) -> "ContextSnapshot":
        """Return a copy carrying whatever the editor reports as open."""
        update = {}
        if editor.current_scene is not None:
            update["current_scene"] = editor.current_scene
        if editor.current_script is not None:
            update["current_script"] = editor.current_script
        return self.model_copy(update=update) if update else self
