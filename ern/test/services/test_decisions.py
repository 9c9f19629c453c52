from __future__ import annotations

import pytest

from ern.services.decisions import ScriptedDecisions


def test_answers_are_replayed_in_order() -> None:
    decisions = ScriptedDecisions(["b", ["a", "c"], True])

    assert decisions.choose_one("one?", ["a", "b"]) == "b"
    assert decisions.choose_many("many?", ["a", "b", "c"]) == ["a", "c"]
    assert decisions.confirm("sure?") is True
    assert decisions.prompts == ["one?", "many?", "sure?"]


def test_running_out_of_answers() -> None:
    with pytest.raises(AssertionError, match="no scripted answer"):
        ScriptedDecisions().confirm("sure?")


def test_wrong_answer_type() -> None:
    with pytest.raises(AssertionError, match="not a bool"):
        ScriptedDecisions(["yes"]).confirm("sure?")


def test_choice_must_be_offered() -> None:
    with pytest.raises(AssertionError):
        ScriptedDecisions([["a", "z"]]).choose_many("many?", ["a", "b"])
