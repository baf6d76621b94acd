"""Storybook story linkage.

Story files are matched to entities by base name: ``Button.stories.tsx``
and ``Button.story.jsx`` both document whatever ``Button.tsx`` exports,
wherever the two files live in the tree.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from pathlib import Path, PurePosixPath

import structlog

from canonicalcat.index.discovery import discover_source_files
from canonicalcat.index.models import Entity, StoryReference

log = structlog.get_logger(__name__)

_STORY_SUFFIXES = (".stories", ".story")


def story_subject(rel_path: str) -> str:
    """Base name a story file documents: ``a/Button.stories.tsx`` -> ``Button``."""
    stem = PurePosixPath(rel_path).stem
    for suffix in _STORY_SUFFIXES:
        if stem.endswith(suffix):
            return stem.removesuffix(suffix)
    return stem


class StoryIndex:
    """Story files grouped by the base name they document."""

    def __init__(self, stories: Sequence[StoryReference] = ()) -> None:
        grouped: dict[str, list[StoryReference]] = defaultdict(list)
        for story in stories:
            grouped[story_subject(story.file_path)].append(story)
        self._by_subject = {subject: sorted(refs) for subject, refs in grouped.items()}
        self._count = len(stories)

    def __len__(self) -> int:
        return self._count

    def stories_for_entity(self, entity: Entity) -> list[StoryReference]:
        return list(self._by_subject.get(PurePosixPath(entity.rel_path).stem, ()))


def find_stories(root: Path, patterns: Sequence[str], exclude: Sequence[str] = ()) -> StoryIndex:
    """Discover story files under ``root``.

    Raises:
        DiscoveryError: If ``root`` is missing or cannot be listed.
    """
    if not patterns:
        return StoryIndex()
    paths = discover_source_files(root, patterns, exclude)
    stories = [
        StoryReference(file_path=path.relative_to(root).as_posix(), name=path.name)
        for path in paths
    ]
    log.debug("stories_found", count=len(stories))
    return StoryIndex(stories)
