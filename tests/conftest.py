"""Shared fixtures for the cmdfy test suite."""

import time

import httpx
import pytest

from cmdfy.core.errors import GenerationError
from cmdfy.core.models import CommandResult, CommandStep, ProviderResult, SystemMetadata


class FakeProvider:
    """Stands in for an LLMProvider in engine and CLI tests."""

    def __init__(self, name, result=None, error=None, delay=0.0, model="fake-model"):
        self.name = name
        self.model = model
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = []

    def generate(self, context, query, metadata):
        self.calls.append((query, metadata))
        deadline = time.monotonic() + self.delay
        while time.monotonic() < deadline:
            if context.cancelled:
                raise GenerationError("cancelled", self.name)
            time.sleep(0.01)
        if self.error is not None:
            raise self.error
        return self.result


class TrickleStream(httpx.SyncByteStream):
    """Response body that arrives one byte at a time."""

    def __init__(self, chunks=100, interval=0.05):
        self.chunks = chunks
        self.interval = interval

    def __iter__(self):
        for _ in range(self.chunks):
            time.sleep(self.interval)
            yield b" "


def make_result(*steps, explanation="does a thing", dangerous=False):
    return CommandResult(
        steps=[CommandStep(**step) for step in steps],
        explanation=explanation,
        dangerous=dangerous,
    )


@pytest.fixture
def metadata():
    return SystemMetadata(
        os="linux",
        shell="/bin/bash",
        available_commands=("git", "ls", "grep"),
        current_dir_files=("README.md", "src/"),
    )


@pytest.fixture
def git_result():
    return make_result(
        {"tool": "git", "args": ["status"], "op": "&&"},
        {"tool": "ls", "args": ["-la"], "op": ""},
        explanation="Check status and list files",
    )


@pytest.fixture
def dangerous_result():
    return make_result(
        {"tool": "rm", "args": ["-rf", "build"]},
        explanation="Remove the build directory",
        dangerous=True,
    )


@pytest.fixture
def entries(git_result):
    return [
        ProviderResult(name="anthropic", result=git_result),
        ProviderResult(name="gemini", error=GenerationError("boom", "gemini")),
        ProviderResult(name="openai", result=git_result),
    ]
