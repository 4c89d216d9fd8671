"""Tests for output formatting."""

import io
import json

from rich.console import Console

from pidwrap.output import OutputContext, get_output_context, set_output_context


def _ctx(json_mode: bool) -> tuple[OutputContext, io.StringIO]:
    output = io.StringIO()
    console = Console(file=output, force_terminal=False)
    return OutputContext(console=console, json_mode=json_mode), output


class TestOutputContextPrint:
    """Tests for OutputContext.print method."""

    def test_print_in_normal_mode(self) -> None:
        ctx, output = _ctx(json_mode=False)
        ctx.print("Hello world")
        assert "Hello world" in output.getvalue()

    def test_print_suppressed_in_json_mode(self) -> None:
        ctx, output = _ctx(json_mode=True)
        ctx.print("Hello world")
        assert output.getvalue() == ""


class TestOutputContextJson:
    """Tests for JSON output."""

    def test_print_json_accepts_lists(self, capsys) -> None:
        ctx, _ = _ctx(json_mode=True)
        ctx.print_json([{"key": "a"}, {"key": "b"}])
        data = json.loads(capsys.readouterr().out)
        assert [row["key"] for row in data] == ["a", "b"]

    def test_print_json_suppressed_in_normal_mode(self, capsys) -> None:
        ctx, _ = _ctx(json_mode=False)
        ctx.print_json({"key": "value"})
        assert capsys.readouterr().out == ""

    def test_result_in_json_mode(self, capsys) -> None:
        ctx, output = _ctx(json_mode=True)
        ctx.result({"removed": []}, "No stale locks")
        assert json.loads(capsys.readouterr().out) == {"removed": []}
        assert output.getvalue() == ""

    def test_result_in_normal_mode(self, capsys) -> None:
        ctx, output = _ctx(json_mode=False)
        ctx.result({"removed": []}, "No stale locks")
        assert capsys.readouterr().out == ""
        assert "No stale locks" in output.getvalue()


class TestOutputContextError:
    """Tests for OutputContext.error."""

    def test_error_in_normal_mode(self) -> None:
        ctx, output = _ctx(json_mode=False)
        ctx.error("Something went wrong")
        assert "Error: Something went wrong" in output.getvalue()

    def test_error_in_json_mode_with_data(self, capsys) -> None:
        ctx, _ = _ctx(json_mode=True)
        ctx.error("No lock record", {"key": "toolA"})
        data = json.loads(capsys.readouterr().out)
        assert data == {"error": "No lock record", "key": "toolA"}


class TestGlobalContext:
    """Tests for get/set_output_context."""

    def test_default_context(self) -> None:
        ctx = get_output_context()
        assert ctx.json_mode is False

    def test_set_context(self) -> None:
        ctx, _ = _ctx(json_mode=True)
        set_output_context(ctx)
        assert get_output_context() is ctx


class TestOutputContextTable:
    """Tests for OutputContext.table."""

    ROWS = [
        {"key": "toolA", "owner_pid": 42, "state": "live", "path": "/tmp/toolA.pid"},
        {"key": "toolB", "owner_pid": None, "state": "unreadable", "path": "/tmp/toolB.pid"},
    ]
    COLUMNS = {"key": "Key", "owner_pid": "PID", "state": "State"}

    def test_table_in_normal_mode(self) -> None:
        ctx, output = _ctx(json_mode=False)
        ctx.table(self.ROWS, self.COLUMNS, title="Locks", styles={"state": {"live": "green"}})
        text = output.getvalue()
        assert "Locks" in text
        assert "toolA" in text
        assert "42" in text
        assert "unreadable" in text
        assert "/tmp/toolA.pid" not in text

    def test_table_in_json_mode(self, capsys) -> None:
        ctx, output = _ctx(json_mode=True)
        ctx.table(self.ROWS, self.COLUMNS)
        data = json.loads(capsys.readouterr().out)
        assert data[1]["path"] == "/tmp/toolB.pid"
        assert output.getvalue() == ""
