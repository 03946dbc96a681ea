import pytest

from models import (
    ActionItem,
    Summary,
    action_items_from_text,
    action_items_to_text,
    ensure_summary_shape,
    lines_to_text,
    parse_recipients,
    text_to_lines,
)


@pytest.mark.parametrize(
    "value",
    [None, "a string", 42, [], {}, {"points": "nope", "decisions": 3, "action_items": {"owner": "x"}}],
)
def test_normalizer_is_total(value):
    summary = ensure_summary_shape(value)

    assert summary == Summary(points=[], decisions=[], action_items=[])


def test_normalizer_fills_action_item_defaults():
    summary = ensure_summary_shape(
        {
            "points": ["A", "B"],
            "decisions": ["Ship it"],
            "action_items": [{"task": "Write docs"}, {"owner": "", "due": "Friday"}, "garbage", None],
        }
    )

    assert summary.points == ["A", "B"]
    assert summary.decisions == ["Ship it"]
    assert summary.action_items == [
        ActionItem(owner="Unassigned", task="Write docs", due=""),
        ActionItem(owner="Unassigned", task="", due="Friday"),
        ActionItem(owner="Unassigned", task="", due=""),
        ActionItem(owner="Unassigned", task="", due=""),
    ]


def test_normalizer_keeps_element_types_consistent():
    summary = ensure_summary_shape({"points": ["ok", 3, None, {"x": 1}, ["nested"]], "decisions": [True]})

    assert summary.points == ["ok", "3"]
    assert summary.decisions == ["true"]


def test_normalizer_is_idempotent():
    raw = {
        "points": ["First", "First", ""],
        "decisions": [],
        "action_items": [{"owner": "Ann", "task": "Book room", "due": "Monday"}, {}],
    }

    once = ensure_summary_shape(raw)
    twice = ensure_summary_shape(once)

    assert twice == once
    assert ensure_summary_shape(once.model_dump()) == once


def test_points_survive_text_round_trip():
    summary = ensure_summary_shape({"points": ["  Budget approved ", "", "Launch moved", "   "]})

    edited = text_to_lines(lines_to_text(summary.points))

    assert edited == ["Budget approved", "Launch moved"]


def test_action_items_text_format():
    items = [ActionItem(owner="Ann", task="Book room", due="Monday"), ActionItem(task="Order pizza")]

    text = action_items_to_text(items)

    assert text == "Ann | Book room | Monday\nUnassigned | Order pizza | "
    assert action_items_from_text(text) == items
    assert action_items_from_text("Bob\n\n | Call vendor") == [
        ActionItem(owner="Bob", task="", due=""),
        ActionItem(owner="Unassigned", task="Call vendor", due=""),
    ]


def test_parse_recipients():
    assert parse_recipients(" a@example.com, ,b@example.com ") == ["a@example.com", "b@example.com"]
    assert parse_recipients(["a@example.com", "  ", 7]) == ["a@example.com"]
    assert parse_recipients(None) == []
