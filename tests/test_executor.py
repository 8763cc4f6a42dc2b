"""Tests for the OpenCode command executor."""

import asyncio
import sys

import pytest

from linear_opencode.executor import OpenCodeExecutor
from linear_opencode.executor.opencode import HELP_TEXT
from linear_opencode.references import detect, parse_command
from linear_opencode.webhooks.models import EventContext


def _command(text: str):
    return parse_command(detect(text)[0])


@pytest.fixture
def event_context():
    return EventContext(
        event_type="Comment",
        action="create",
        actor="Ada",
        issue_id="issue-1",
        issue_identifier="ENG-7",
    )


class FakeProcess:
    def __init__(self, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0, delay: float = 0):
        self._stdout = stdout
        self._stderr = stderr
        self._delay = delay
        self.returncode = returncode
        self.killed = False

    async def communicate(self):
        await asyncio.sleep(self._delay)
        return self._stdout, self._stderr

    def kill(self):
        self.killed = True

    async def wait(self):
        return self.returncode


def _patch_subprocess(monkeypatch, process: FakeProcess, seen: list):
    async def fake_exec(*args, **kwargs):
        seen.append((args, kwargs))
        return process

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)


class TestOpenCodeExecutor:
    async def test_help_answered_locally(self, event_context, monkeypatch):
        seen = []
        _patch_subprocess(monkeypatch, FakeProcess(), seen)
        result = await OpenCodeExecutor().execute(_command("@opencode"), event_context)
        assert result.success
        assert result.response == HELP_TEXT
        assert seen == []

    async def test_runs_opencode_with_prompt(self, event_context, monkeypatch):
        seen = []
        _patch_subprocess(monkeypatch, FakeProcess(stdout=b"All tests passed\n"), seen)
        executor = OpenCodeExecutor(binary="oc", working_dir="/tmp")
        result = await executor.execute(_command("@opencode run-tests --verbose"), event_context)

        assert result.success
        assert result.response == "All tests passed"
        args, kwargs = seen[0]
        assert args[:2] == ("oc", "run")
        assert "Task: run-tests" in args[2]
        assert "Issue: ENG-7" in args[2]
        assert "Options: verbose" in args[2]
        assert kwargs["cwd"] == "/tmp"

    async def test_nonzero_exit_includes_stderr(self, event_context, monkeypatch):
        _patch_subprocess(monkeypatch, FakeProcess(stderr=b"model unavailable", returncode=1), [])
        result = await OpenCodeExecutor().execute(_command("@opencode fix it"), event_context)
        assert not result.success
        assert result.response == "model unavailable"

    async def test_output_truncated(self, event_context, monkeypatch):
        _patch_subprocess(monkeypatch, FakeProcess(stdout=b"y" * 100), [])
        result = await OpenCodeExecutor(max_output_chars=10).execute(
            _command("@opencode explain"), event_context
        )
        assert result.response.startswith("y" * 10 + "\n... (truncated, 100 total chars)")

    async def test_timeout_kills_process(self, event_context, monkeypatch):
        process = FakeProcess(delay=5)
        _patch_subprocess(monkeypatch, process, [])
        result = await OpenCodeExecutor(timeout=0.05).execute(
            _command("@opencode slow"), event_context
        )
        assert not result.success
        assert "timed out" in result.response
        assert process.killed

    async def test_missing_binary(self, event_context):
        executor = OpenCodeExecutor(binary="definitely-not-an-installed-opencode-binary")
        result = await executor.execute(_command("@opencode review"), event_context)
        assert not result.success
        assert "not found" in result.response

    async def test_real_subprocess_failure(self, event_context):
        # The interpreter cannot open a script named "run"
        executor = OpenCodeExecutor(binary=sys.executable, timeout=30)
        result = await executor.execute(_command("@opencode review"), event_context)
        assert not result.success
        assert result.response
