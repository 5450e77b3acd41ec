"""Tests for domain enums."""

import pytest

from tally.domain.errors import InvalidField, UnknownAction
from tally.domain.value_objects.enums import CounterAction, CounterField


def test_counter_fields():
    assert [f.value for f in CounterField] == ["likes", "dislikes", "infos"]


def test_counter_field_columns():
    assert CounterField.LIKES.column == 2
    assert CounterField.DISLIKES.column == 3
    assert CounterField.INFOS.column == 4


def test_parse_field():
    assert CounterField.parse("dislikes") is CounterField.DISLIKES


@pytest.mark.parametrize("raw", [None, "", "Likes", "views", " likes"])
def test_parse_field_rejects_unknown(raw):
    with pytest.raises(InvalidField):
        CounterField.parse(raw)


def test_invalid_field_message():
    with pytest.raises(InvalidField, match="Invalid field: views. Must be likes, dislikes, or infos."):
        CounterField.parse("views")


def test_parse_action_defaults_to_get():
    assert CounterAction.parse(None) is CounterAction.GET
    assert CounterAction.parse("") is CounterAction.GET


def test_parse_action_bump():
    assert CounterAction.parse("bump") is CounterAction.BUMP


def test_parse_action_unknown():
    with pytest.raises(UnknownAction, match="Unknown action: delete. Valid actions are: get, bump"):
        CounterAction.parse("delete")
