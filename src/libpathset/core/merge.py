"""
Merge algebra for pattern-keyed template mappings.

A change to a path set can arrive in several shapes: a mapping of pattern to
templates, a bare list of templates, a single template, or another path set.
Each shape is classified once into a tagged variant and normalized into
pattern/templates pairs, which are then combined with the existing templates
under a MergePolicy.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Union, runtime_checkable

logger = logging.getLogger(__name__)

PARTS = ("paths", "files")

TemplateMap = dict[re.Pattern, list[str]]


def as_pattern(key: str | re.Pattern) -> re.Pattern:
    """
    Coerce a mapping key into a compiled OS pattern.

    Args:
        key: A compiled pattern or a regular expression string

    Returns:
        The compiled pattern

    Raises:
        TypeError: If key is neither a string nor a compiled pattern
    """
    if isinstance(key, re.Pattern):
        return key
    if isinstance(key, str):
        return re.compile(key)
    raise TypeError(f"OS pattern must be a str or re.Pattern, not {type(key).__name__}")


def as_templates(value: str | Iterable[str]) -> list[str]:
    """Return a fresh template list; a bare string becomes a one-element list."""
    if isinstance(value, (str, re.Pattern)):
        return [value]
    return list(value)


class MergePolicy(Enum):
    """How incoming templates combine with the templates already stored for a pattern."""
    APPEND = "append"      # existing + incoming
    PREPEND = "prepend"    # incoming + existing
    REPLACE = "replace"    # incoming only
    REMOVE = "remove"      # existing minus every incoming element

    def combine(self, existing: list[str], incoming: list[str]) -> list[str]:
        """
        Combine two template lists into a new list.

        Neither argument is modified.
        """
        if self is MergePolicy.APPEND:
            return existing + incoming
        if self is MergePolicy.PREPEND:
            return incoming + existing
        if self is MergePolicy.REPLACE:
            return list(incoming)
        return [template for template in existing if template not in incoming]


@runtime_checkable
class TemplateSource(Protocol):
    """Anything exposing both template mappings, i.e. a PathSet."""

    @property
    def paths(self) -> Mapping[re.Pattern, list[str]]: ...

    @property
    def files(self) -> Mapping[re.Pattern, list[str]]: ...


@dataclass(frozen=True)
class ByPattern:
    """Templates keyed by pattern; each key merges against the same key."""
    templates: Mapping


@dataclass(frozen=True)
class ForAllKeys:
    """One template list applied to every pattern already present."""
    templates: list


@dataclass(frozen=True)
class SingleTemplate:
    """A single template, treated as a one-element ForAllKeys."""
    template: str | re.Pattern


@dataclass(frozen=True)
class FromRegistry:
    """Another path set; its paths merge into paths and its files into files."""
    registry: TemplateSource


Change = Union[ByPattern, ForAllKeys, SingleTemplate, FromRegistry]


def classify(value) -> Change:
    """
    Classify a caller-supplied change into one of the tagged variants.

    Args:
        value: A mapping, list/tuple, str, re.Pattern, path set, or an
               already-tagged change

    Returns:
        The tagged change

    Raises:
        TypeError: If the value has none of the supported shapes
    """
    if isinstance(value, (ByPattern, ForAllKeys, SingleTemplate, FromRegistry)):
        return value
    if isinstance(value, TemplateSource):
        return FromRegistry(value)
    if isinstance(value, Mapping):
        return ByPattern(value)
    if isinstance(value, (str, re.Pattern)):
        return SingleTemplate(value)
    if isinstance(value, (list, tuple)):
        return ForAllKeys(list(value))
    raise TypeError(f"Cannot merge a {type(value).__name__} into a path set")


def normalize(
    change: Change,
    ours: Mapping[re.Pattern, list[str]],
    part: str = "paths",
) -> list[tuple[re.Pattern, list[str]]]:
    """
    Normalize a tagged change into pattern/templates pairs.

    Args:
        change: Tagged change to normalize
        ours: The mapping the change will be applied to. Bare lists and
              single templates expand to one pair per pattern in it.
        part: Which mapping of a FromRegistry change to read ("paths" or "files")

    Returns:
        List of (pattern, templates) pairs, each templates list a fresh copy
    """
    if isinstance(change, FromRegistry):
        source = getattr(change.registry, part)
        return [(as_pattern(key), as_templates(value)) for key, value in source.items()]

    if isinstance(change, ByPattern):
        return [
            (as_pattern(key), as_templates(value))
            for key, value in change.templates.items()
        ]

    if isinstance(change, SingleTemplate):
        change = ForAllKeys([change.template])

    # A bare list only ever touches patterns we already track
    return [(pattern, list(change.templates)) for pattern in list(ours)]


def apply(
    ours: TemplateMap,
    pairs: Iterable[tuple[re.Pattern, list[str]]],
    policy: MergePolicy,
) -> None:
    """
    Combine pattern/templates pairs into a mapping in place.

    A pattern whose merged list ends up empty is removed from the mapping.
    """
    for pattern, incoming in pairs:
        merged = policy.combine(ours.get(pattern, []), incoming)
        if merged:
            ours[pattern] = merged
        else:
            ours.pop(pattern, None)


def merge_into(
    ours: TemplateMap,
    value,
    policy: MergePolicy,
    part: str = "paths",
) -> None:
    """Classify, normalize and apply a single change to one mapping."""
    pairs = normalize(classify(value), ours, part)
    logger.debug("Merging %d pattern(s) into %s with %s", len(pairs), part, policy.value)
    apply(ours, pairs, policy)


def delete_keys(ours: TemplateMap, patterns: Iterable[str | re.Pattern]) -> None:
    """Remove every given pattern from the mapping; absent patterns are ignored."""
    for pattern in patterns:
        ours.pop(as_pattern(pattern), None)
