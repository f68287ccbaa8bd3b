"""Tests for turning command steps into a shell line."""

import pytest

from cmdfy.core.assembler import assemble, quote_arg
from cmdfy.core.errors import AssemblyError
from cmdfy.core.models import CommandResult, CommandStep

from tests.conftest import make_result


def test_joins_steps_with_operators(git_result):
    assert assemble(git_result) == "git status && ls -la"


def test_pipeline_with_redirect():
    result = make_result(
        {"tool": "grep", "args": ["-r", "TODO", "."], "op": "|"},
        {"tool": "wc", "args": ["-l"], "op": ">"},
        {"tool": "count.txt"},
    )
    assert assemble(result) == "grep -r TODO . | wc -l > count.txt"


def test_step_without_args():
    result = make_result({"tool": "pwd", "op": ";"}, {"tool": "ls"})
    assert assemble(result) == "pwd ; ls"


def test_quotes_args_with_spaces():
    result = make_result({"tool": "cat", "args": ["my file"]})
    assert assemble(result) == 'cat "my file"'


def test_leaves_quoted_args_alone():
    result = make_result({"tool": "echo", "args": ["'already quoted'", '"double quoted"']})
    assert assemble(result) == "echo 'already quoted' \"double quoted\""


@pytest.mark.parametrize("arg, expected", [
    ("plain", "plain"),
    ("tab\tseparated", '"tab\tseparated"'),
    ('say "hi" there', '"say "hi" there"'),
    ("", ""),
])
def test_quote_arg(arg, expected):
    assert quote_arg(arg) == expected


def test_last_operator_is_dropped():
    result = CommandResult(steps=[CommandStep(tool="ls", op="|")])
    assert assemble(result) == "ls"


def test_missing_operator_between_steps_raises():
    # Built without validation, as a provider bypassing the model would
    result = CommandResult.model_construct(
        steps=[CommandStep(tool="ls"), CommandStep(tool="pwd")],
        explanation="",
        dangerous=False,
    )
    with pytest.raises(AssemblyError):
        assemble(result)
