"""Shared test fixtures for granola-md."""

import pytest

from granola_md.config.models import GranolaMdConfig


def doc_tree(*blocks):
    return {"type": "doc", "content": list(blocks)}


def paragraph(*texts):
    return {"type": "paragraph", "content": [{"type": "text", "text": t} for t in texts]}


def heading(level, text):
    return {"type": "heading", "attrs": {"level": level}, "content": [{"type": "text", "text": text}]}


def bullet_list(*items):
    return {"type": "bulletList", "content": [{"type": "listItem", "content": [paragraph(i)]} for i in items]}


@pytest.fixture
def sample_config():
    return GranolaMdConfig()


@pytest.fixture
def meeting_tree():
    return doc_tree(
        heading(1, "Weekly sync"),
        paragraph("Discussed the Q3 roadmap."),
        heading(2, "Action Items"),
        bullet_list("Ship the importer", "Review filenames"),
    )


@pytest.fixture
def substantive_doc(meeting_tree):
    return {
        "id": "doc-123",
        "title": "Weekly sync",
        "created_at": "2024-03-05T14:30:00Z",
        "updated_at": "2024-03-05T15:10:00Z",
        "notes": meeting_tree,
        "notes_plain": "Weekly sync Discussed the Q3 roadmap.",
        "notes_markdown": "# Weekly sync\n\nDiscussed the Q3 roadmap.",
        "last_viewed_panel": {"content": meeting_tree},
        "people": {
            "attendees": [
                {
                    "email": "ana.lopez@acme.io",
                    "details": {
                        "person": {"name": {"fullName": "Ana López"}},
                        "company": {"name": "Acme Inc"},
                    },
                },
                {
                    "email": "me@acme.io",
                    "details": {"person": {"name": {"fullName": "Sam Doe"}}},
                },
            ],
            "creator": {"name": "Host Person", "email": "host@acme.io"},
        },
    }


@pytest.fixture
def empty_doc():
    return {
        "id": "doc-empty",
        "title": "Untitled meeting",
        "created_at": "2024-03-05T14:30:00Z",
        "updated_at": "2024-03-05T14:30:00Z",
        "notes": {"type": "doc", "content": [{"type": "paragraph"}]},
        "notes_plain": "",
        "notes_markdown": "   ",
        "last_viewed_panel": {"content": {"type": "doc", "content": []}},
    }
