from __future__ import annotations

from unittest.mock import MagicMock

from src.hyperbeam.context.context_analyzer import ContextAnalyzer
from src.hyperbeam.models.context_snapshot import ContextSnapshot, EditorState
from tests.conftest import StaticIntrospector


def test_snapshot_merges_project_and_editor_state() -> None:
    analyzer = ContextAnalyzer(StaticIntrospector())

    snapshot = analyzer.analyze_current_project()

    assert snapshot.project_name == "Space Miner"
    assert snapshot.current_scene == "Main"
    assert snapshot.current_script == "res://player.gd"
    assert "res://main.tscn" in snapshot.scene_files


def test_editor_without_open_files_keeps_project_values() -> None:
    project = ContextSnapshot(project_name="Demo", current_scene="Level1")
    analyzer = ContextAnalyzer(StaticIntrospector(snapshot=project, editor=EditorState()))

    assert analyzer.analyze_current_project().current_scene == "Level1"


def test_failing_introspector_yields_defaults() -> None:
    introspector = MagicMock()
    introspector.snapshot_project.side_effect = RuntimeError("editor not ready")
    introspector.snapshot_editor.side_effect = AttributeError("no edited scene")

    snapshot = ContextAnalyzer(introspector).analyze_current_project()

    assert snapshot == ContextSnapshot()
    assert snapshot.project_name == "Unknown"
    assert snapshot.scene_files == frozenset()
    assert snapshot.current_script is None


def test_wrong_return_types_and_blank_name_fall_back() -> None:
    introspector = MagicMock()
    introspector.snapshot_project.return_value = {"project_name": "not a snapshot"}
    introspector.snapshot_editor.return_value = None
    assert ContextAnalyzer(introspector).analyze_current_project().project_name == "Unknown"

    blank = StaticIntrospector(snapshot=ContextSnapshot(project_name="   "), editor=EditorState())
    assert ContextAnalyzer(blank).analyze_current_project().project_name == "Unknown"


def test_default_analyzer_without_host() -> None:
    analyzer = ContextAnalyzer()

    summary = analyzer.get_context_summary()
    assert "Project: Unknown\nScene files: 0\nScript files: 0" in summary
    assert "Current Scene" not in summary
    assert "CharacterBody2D" in analyzer.get_available_nodes()
    assert "queue_free()" in analyzer.get_available_methods("Node")
    assert analyzer.get_available_methods("Sprite2D") == []
    assert analyzer.get_relevant_documentation("signals") == "Documentation for: signals"


def test_context_summary_names_open_scene_and_script() -> None:
    summary = ContextAnalyzer(StaticIntrospector()).get_context_summary()

    assert summary.startswith("Current Context:")
    assert "Project: Space Miner" in summary
    assert "Scene files: 2" in summary
    assert "Current Scene: Main" in summary
    assert "Current Script: res://player.gd" in summary
