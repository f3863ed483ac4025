"""
Tests for the object tour (core/services/objects.py, core/resources_loader.py).
"""

import json

import pytest

from core.resources_loader import get_examples_path, load_example_objects
from core.services.objects import (
    RELATIONSHIPS,
    build_platform_note,
    describe_object,
    example_title,
    format_published,
)


def test_bundled_examples_load_in_tour_order():
    examples = load_example_objects()

    assert list(examples) == ["note", "create", "follow", "accept", "like", "announce", "delete", "actor", "collection"]
    assert all(obj.get("type") for obj in examples.values())


def test_examples_path_override(monkeypatch, tmp_path):
    custom = tmp_path / "mine.json"
    custom.write_text(json.dumps({"like": {"type": "Like", "id": "https://x/likes/1"}}), encoding="utf-8")
    monkeypatch.setenv("FEDI_PRIMER_EXAMPLES_PATH", str(custom))

    assert get_examples_path() == custom
    assert load_example_objects() == {"like": {"type": "Like", "id": "https://x/likes/1"}}


def test_examples_file_must_be_an_object(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError):
        load_example_objects(bad)


def test_example_title():
    assert example_title("note") == "Note Object"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-01-15T10:30:00Z", "2024-01-15 10:30:00 UTC"),
        ("2024-01-15T10:30:00+00:00", "2024-01-15 10:30:00 UTC"),
        ("2024-01-15T10:30:00", "2024-01-15 10:30:00"),
        ("yesterday", "yesterday"),
    ],
)
def test_format_published(value, expected):
    assert format_published(value) == expected


def test_describe_create_with_embedded_note():
    rows = dict(describe_object(load_example_objects()["create"]))

    assert rows["Type"] == "Create"
    assert rows["Actor"] == "https://mastodon.social/users/professor"
    assert rows["Published"] == "2024-01-15 10:30:00 UTC"
    assert rows["Object (embedded)"] == "Note - https://mastodon.social/users/professor/statuses/123456"
    assert rows["To"] == "https://www.w3.org/ns/activitystreams#Public"


def test_describe_follow_with_object_reference():
    rows = dict(describe_object(load_example_objects()["follow"]))

    assert rows["Object (reference)"] == "https://mastodon.social/users/professor"
    assert "Content" not in rows


def test_describe_note_strips_html_content():
    rows = dict(describe_object({"type": "Note", "id": "n", "content": "<p>Hi <b>there</b></p>"}))

    assert rows["Content"] == "Hi there"


def test_describe_collection_shows_zero_total():
    rows = dict(describe_object({"type": "OrderedCollection", "id": "c", "totalItems": 0}))

    assert rows["Total Items"] == "0"


def test_relationships_cover_follow_flow():
    titles = [title for title, _ in RELATIONSHIPS]

    assert "Student follows Professor" in titles
    assert "Professor accepts follow" in titles


def test_platform_note_is_public_with_hashtags(fixed_now):
    note = build_platform_note(fixed_now)

    assert note["type"] == "Note"
    assert note["published"] == "2024-03-01T09:00:00+00:00"
    assert note["to"] == ["https://www.w3.org/ns/activitystreams#Public"]
    assert {t["name"] for t in note["tag"]} == {"#ActivityPub", "#DistributedSystems", "#UniversityEducation"}
