from __future__ import annotations

import json

import pytest

from team_competition.core.roster import extract_roster_text, parse_roster, parse_roster_page


@pytest.mark.parametrize("text", [None, "", "   \n\n  \n"])
def test_parse_roster_empty_input_gives_no_groups(text):
    assert parse_roster(text) == []


def test_parse_roster_splits_blocks_and_keeps_order():
    text = "Bus 1\n  Alice Smith \nBob Jones\n\n\nBus 2\nCarol Young\n"

    groups = parse_roster(text)

    assert [g.title for g in groups] == ["Bus 1", "Bus 2"]
    assert groups[0].member_names == ["Alice Smith", "Bob Jones"]
    assert groups[1].member_names == ["Carol Young"]


def test_parse_roster_whitespace_only_line_separates_blocks():
    groups = parse_roster("Red\nAnn\n   \nBlue\nBen")
    assert [g.title for g in groups] == ["Red", "Blue"]


def test_parse_roster_title_only_group_has_no_members():
    groups = parse_roster("Lonely bus\r\n\r\nBus 2\r\nAnn")
    assert groups[0].title == "Lonely bus"
    assert groups[0].member_names == []
    assert groups[1].member_names == ["Ann"]


def test_extract_roster_text_reads_bus_field():
    page = json.dumps({"bus": "Bus 1\nAnn", "rooms": "ignored"})
    assert extract_roster_text(page) == "Bus 1\nAnn"


@pytest.mark.parametrize("page", ['{"rooms": "x"}', '{"bus": 12}', "[1, 2]", None, ""])
def test_extract_roster_text_without_roster(page):
    assert extract_roster_text(page) == ""


def test_extract_roster_text_plain_text_page():
    assert extract_roster_text("Bus 1\nAnn") == "Bus 1\nAnn"


def test_parse_roster_page():
    groups = parse_roster_page(json.dumps({"bus": "A\nx\n\nB\ny"}))
    assert [g.title for g in groups] == ["A", "B"]


def test_extract_roster_text_deeply_nested_page():
    assert extract_roster_text("[" * 100000 + "]" * 100000) == ""
