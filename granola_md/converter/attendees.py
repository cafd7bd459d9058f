"""Attendee extraction and tag rendering for note frontmatter."""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from granola_md.config.models import AttendeeTagsConfig

logger = logging.getLogger(__name__)

_NON_TAG_RE = re.compile(r"[^a-z0-9-]")
_DASH_RUN_RE = re.compile(r"-+")


@dataclass(frozen=True)
class Attendee:
    name: str
    email: str | None = None
    company: str | None = None
    is_host: bool = False


def parse_attendees(people: Any, include_host: bool = False) -> list[Attendee]:
    """Read the ``people`` field in either of its known shapes.

    Older records carry a list of names; newer ones a mapping with an
    ``attendees`` list and an optional ``creator``.
    """
    if isinstance(people, list):
        return [Attendee(name=name) for name in people if isinstance(name, str)]

    if not isinstance(people, Mapping):
        return []

    attendees: list[Attendee] = []
    raw = people.get("attendees")
    if isinstance(raw, list):
        for entry in raw:
            name = _dig(entry, "details", "person", "name", "fullName")
            if not name:
                continue
            attendees.append(
                Attendee(
                    name=name,
                    email=_dig(entry, "email"),
                    company=_dig(entry, "details", "company", "name"),
                )
            )

    creator = people.get("creator")
    if include_host and isinstance(creator, Mapping):
        attendees.append(
            Attendee(
                name=_dig(creator, "name") or "Unknown Host",
                email=_dig(creator, "email"),
                is_host=True,
            )
        )
    return attendees


def attendee_tags(people: Any, config: AttendeeTagsConfig) -> list[str]:
    """Render one tag per attendee from ``config.tag_template``.

    Attendees missing a value the template needs are skipped. Duplicates are
    dropped, first occurrence wins.
    """
    my_name = config.my_name.strip().lower()
    tags: list[str] = []

    for attendee in parse_attendees(people, include_host=config.include_host):
        name = attendee.name.strip()
        if config.exclude_my_name and my_name and name.lower() == my_name:
            continue

        tag = _render(config.tag_template, attendee, name)
        if tag is None:
            logger.debug("Skipping attendee %r: template needs a missing field", name)
            continue
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def normalize_for_tag(value: str) -> str:
    """``"José García"`` -> ``"jose-garcia"``"""
    decomposed = unicodedata.normalize("NFD", value)
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = re.sub(r"\s+", "-", ascii_only.lower())
    slug = _DASH_RUN_RE.sub("-", _NON_TAG_RE.sub("", slug))
    return slug.strip("-")


def _render(template: str, attendee: Attendee, name: str) -> str | None:
    tag = template
    if "{name}" in tag:
        if not name:
            return None
        tag = tag.replace("{name}", normalize_for_tag(name))
    if "{email}" in tag:
        if not attendee.email:
            return None
        tag = tag.replace("{email}", re.sub(r"[@.]", "-", attendee.email.lower()))
    if "{domain}" in tag:
        if not attendee.email or "@" not in attendee.email:
            return None
        domain = attendee.email.split("@")[1]
        tag = tag.replace("{domain}", domain.lower().replace(".", "-"))
    if "{company}" in tag:
        if not attendee.company:
            return None
        tag = tag.replace("{company}", normalize_for_tag(attendee.company))

    tag = re.sub(r"/+", "/", tag)
    return tag.removesuffix("/").strip()


def _dig(value: Any, *keys: str) -> str | None:
    for key in keys:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value if isinstance(value, str) and value else None
