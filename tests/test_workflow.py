"""Tests for workflow module."""

import dataclasses
import io

import pytest

from fanout.workflow import (
    ConcurrentStage,
    SequentialStage,
    StageKind,
    StepDeclaration,
    StepType,
    Workflow,
    WorkflowError,
    build_workflow,
    needs_stdin,
    parse_step_args,
    read_stdin_commands,
)


class TestStages:
    """Tests for stage dataclasses."""

    def test_sequential_stage(self):
        """Test sequential stage exposes its single command."""
        stage = SequentialStage("make build")
        assert stage.kind == StageKind.SEQUENTIAL
        assert stage.commands == ("make build",)

    def test_concurrent_stage_stores_tuple(self):
        """Test concurrent stage converts its commands to a tuple."""
        stage = ConcurrentStage(["a", "b"])
        assert stage.kind == StageKind.CONCURRENT
        assert stage.commands == ("a", "b")

    def test_concurrent_stage_requires_commands(self):
        """Test empty concurrent stage is rejected."""
        with pytest.raises(WorkflowError):
            ConcurrentStage(())

    def test_blank_command_rejected(self):
        """Test blank commands are rejected."""
        with pytest.raises(WorkflowError):
            SequentialStage("   ")

    def test_stages_are_immutable(self):
        """Test stages cannot be modified after construction."""
        stage = SequentialStage("true")
        with pytest.raises(dataclasses.FrozenInstanceError):
            stage.command = "false"


class TestWorkflow:
    """Tests for Workflow class."""

    def test_empty_workflow_rejected(self):
        """Test an empty workflow fails at construction."""
        with pytest.raises(WorkflowError, match="no stages"):
            Workflow(stages=())

    def test_iteration_order(self):
        """Test stages iterate in construction order."""
        stages = [SequentialStage("a"), ConcurrentStage(("b", "c")), SequentialStage("d")]
        workflow = Workflow(stages=stages)

        assert list(workflow) == stages
        assert len(workflow) == 3
        assert workflow.total_commands == 4

    def test_workflow_is_read_only(self):
        """Test the stage sequence cannot be replaced."""
        workflow = Workflow(stages=[SequentialStage("a")])
        assert isinstance(workflow.stages, tuple)
        with pytest.raises(dataclasses.FrozenInstanceError):
            workflow.stages = ()


class TestParseStepArgs:
    """Tests for parse_step_args."""

    def test_order_preserved(self):
        """Test declarations keep command-line order."""
        decls = parse_step_args(["-s", "a", "-c", "b", "--concurrent", "c", "-i", "--sequential", "d"])

        assert [d.step_type for d in decls] == [
            StepType.SEQUENTIAL,
            StepType.CONCURRENT,
            StepType.CONCURRENT,
            StepType.STDIN,
            StepType.SEQUENTIAL,
        ]
        assert [d.command for d in decls] == ["a", "b", "c", None, "d"]

    def test_inline_value(self):
        """Test --flag=value form."""
        decls = parse_step_args(["--sequential=echo hi"])
        assert decls == [StepDeclaration(StepType.SEQUENTIAL, "echo hi")]

    def test_missing_value(self):
        """Test a flag without a command is an error."""
        with pytest.raises(WorkflowError, match="requires a command"):
            parse_step_args(["-s"])

    def test_unknown_token(self):
        """Test stray arguments are rejected."""
        with pytest.raises(WorkflowError, match="Unexpected argument"):
            parse_step_args(["echo"])

    def test_empty_command(self):
        """Test an empty command string is rejected."""
        with pytest.raises(WorkflowError):
            parse_step_args(["-c", "  "])


class TestReadStdinCommands:
    """Tests for read_stdin_commands."""

    def test_trims_and_drops_blank_lines(self):
        """Test lines are trimmed and blank lines discarded."""
        stream = io.StringIO("  echo a  \n\n\t\necho b\n   \n")
        assert read_stdin_commands(stream) == ["echo a", "echo b"]

    def test_empty_stream(self):
        """Test empty input yields no commands."""
        assert read_stdin_commands(io.StringIO("")) == []


class TestBuildWorkflow:
    """Tests for build_workflow grouping."""

    def test_consecutive_concurrent_merge(self):
        """Test A then {B,C,D} then E."""
        decls = parse_step_args(["-s", "A", "-c", "B", "-c", "C", "-c", "D", "-s", "E"])
        workflow = build_workflow(decls)

        assert list(workflow) == [
            SequentialStage("A"),
            ConcurrentStage(("B", "C", "D")),
            SequentialStage("E"),
        ]

    def test_sequential_splits_concurrent_groups(self):
        """Test a sequential step separates two concurrent groups."""
        decls = parse_step_args(["-c", "a", "-s", "b", "-c", "c"])
        workflow = build_workflow(decls)

        assert [s.kind for s in workflow] == [StageKind.CONCURRENT, StageKind.SEQUENTIAL, StageKind.CONCURRENT]

    def test_each_sequential_is_own_stage(self):
        """Test repeated sequential steps are never merged."""
        workflow = build_workflow(parse_step_args(["-s", "a", "-s", "b"]))
        assert len(workflow) == 2

    def test_stdin_group_at_position(self):
        """Test stdin commands form one concurrent stage where -i appears."""
        decls = parse_step_args(["-s", "first", "-i", "-s", "last"])
        workflow = build_workflow(decls, ["x", "y"])

        assert list(workflow) == [
            SequentialStage("first"),
            ConcurrentStage(("x", "y")),
            SequentialStage("last"),
        ]

    def test_stdin_not_merged_with_concurrent(self):
        """Test stdin stage stays separate from neighbouring -c steps."""
        decls = parse_step_args(["-c", "a", "-i", "-c", "b"])
        workflow = build_workflow(decls, ["x"])

        assert [s.commands for s in workflow] == [("a",), ("x",), ("b",)]

    def test_empty_stdin_contributes_nothing(self):
        """Test -i with no stdin commands adds no stage."""
        decls = parse_step_args(["-s", "a", "-i"])
        workflow = build_workflow(decls, [])
        assert list(workflow) == [SequentialStage("a")]

    def test_empty_input_is_error(self):
        """Test nothing to run fails before execution."""
        with pytest.raises(WorkflowError, match="No commands"):
            build_workflow([])

    def test_only_empty_stdin_is_error(self):
        """Test a lone -i with empty stdin fails."""
        with pytest.raises(WorkflowError):
            build_workflow(parse_step_args(["-i"]), [])

    def test_needs_stdin(self):
        """Test stdin detection."""
        assert needs_stdin(parse_step_args(["-s", "a", "-i"]))
        assert not needs_stdin(parse_step_args(["-s", "a"]))
