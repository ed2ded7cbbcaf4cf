"""Helpers for tagging entity spans in text.

Tags from several sources are layered with ``enrich_entities``: a tag is only
added when its range does not overlap a tag that is already there, so the
first source to claim a span keeps it.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from ..builtin_entities import get_builtin_entity_parser
from .taxonomy import TaggedEntity

logger = logging.getLogger(__name__)


def ranges_overlap(first: tuple[int, int] | None, second: tuple[int, int] | None) -> bool:
    """Check whether two half-open ranges share at least one character.

    A missing range cannot be located in the text and never overlaps.
    """
    if first is None or second is None:
        return False
    return first[0] < second[1] and second[0] < first[1]


def enrich_entities(
    tagged_entities: Iterable[TaggedEntity],
    other_tagged_entities: Iterable[TaggedEntity],
) -> list[TaggedEntity]:
    """Add tags that do not overlap the ones already accepted.

    Args:
        tagged_entities: Accepted tags, which win every conflict
        other_tagged_entities: Candidate tags, tried in order

    Returns:
        Accepted tags followed by the non-overlapping candidates
    """
    enriched = list(tagged_entities)
    for candidate in other_tagged_entities:
        if any(ranges_overlap(candidate.range, accepted.range) for accepted in enriched):
            logger.debug(f"Skipping {candidate.entity} tag {candidate.value!r}: overlaps an accepted tag")
            continue
        enriched.append(candidate)
    return enriched


def tag_builtin_entities(text: str, language: str) -> list[TaggedEntity]:
    """Tag every builtin entity of the language in text."""
    parser = get_builtin_entity_parser(language)
    return [
        TaggedEntity(value=match.value, range=match.range, entity=match.entity_kind.identifier)
        for match in parser.extract_entities(text)
    ]


def disambiguate_tagged_entities(
    tagged_entities: Iterable[TaggedEntity],
    slot_name_mapping: Mapping[str, str],
) -> list[TaggedEntity]:
    """Assign slot names to tags from an intent's slot mapping.

    Tags that already carry a slot name are kept as they are. When several
    slots share the tag's entity, the first slot declared for the intent is
    used. Tags whose entity no slot of the intent uses keep no slot name.

    Args:
        tagged_entities: Tags to name
        slot_name_mapping: Slot name -> entity name for one intent

    Returns:
        Tags in the same order, with slot names assigned where possible
    """
    entity_to_slot_names: dict[str, list[str]] = {}
    for slot_name, entity in slot_name_mapping.items():
        entity_to_slot_names.setdefault(entity, []).append(slot_name)

    disambiguated = []
    for tag in tagged_entities:
        if tag.slot_name is None and tag.entity in entity_to_slot_names:
            slot_names = entity_to_slot_names[tag.entity]
            if len(slot_names) > 1:
                logger.debug(f"Entity {tag.entity} fills slots {slot_names}; using {slot_names[0]}")
            tag = tag.with_slot_name(slot_names[0])
        disambiguated.append(tag)
    return disambiguated


__all__ = [
    "ranges_overlap",
    "enrich_entities",
    "tag_builtin_entities",
    "disambiguate_tagged_entities",
]
