"""
Theologos - Slugger

Maps between work titles and URL-safe slugs.

Two resolution strategies are supported because the corpus mixes curated
and generated slugs:
    1. Override table: explicit slug -> title pairs for irregular cases
       (apostrophes, abbreviations, several accepted spellings)
    2. Derived lookup: slugify every candidate title and compare

Usage:
    slugger = Slugger()
    slugger.slug_for_title("Westminster Shorter Catechism")   # "wsc"
    slugger.resolve("wsc", titles)                            # the title
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.errors import AmbiguousSlugError, LibraryConfigError, NotFoundError
from domain.entities import Work


# Maximal runs of characters outside [a-z0-9]
_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True, slots=True)
class SlugOverride:
    """A curated slug for an exact work title."""
    slug: str
    title: str


DEFAULT_SLUG_OVERRIDES: Tuple[SlugOverride, ...] = (
    SlugOverride("wsc", "Westminster Shorter Catechism"),
    SlugOverride("westminster-shorter-catechism", "Westminster Shorter Catechism"),
    SlugOverride("wlc", "Westminster Larger Catechism"),
    SlugOverride("wcf", "Westminster Confession of Faith"),
    SlugOverride("heidelberg", "Heidelberg Catechism"),
    SlugOverride("apostles-creed", "Apostles' Creed"),
    SlugOverride("calvins-institutes", "Calvin's Institutes of the Christian Religion"),
    SlugOverride("baptist-catechism", "Keach's Catechism"),
)


def slugify(title: str) -> str:
    """
    Derive a slug from a title.

    Lower-cases, collapses every run of characters outside [a-z0-9] into a
    single hyphen and strips hyphens from both ends. Never raises.
    """
    return _NON_SLUG_CHARS.sub("-", title.lower()).strip("-")


class Slugger:
    """
    Resolves slugs against an explicit override table with slugify fallback.

    The override table is configuration handed in at construction; the
    slugger holds no other state.
    """

    def __init__(self, overrides: Optional[Iterable[SlugOverride]] = None):
        self._overrides: Tuple[SlugOverride, ...] = tuple(
            DEFAULT_SLUG_OVERRIDES if overrides is None else overrides
        )
        # First entry wins in both directions
        self._by_slug: Dict[str, str] = {}
        self._by_title: Dict[str, str] = {}
        for entry in self._overrides:
            self._by_slug.setdefault(entry.slug, entry.title)
            self._by_title.setdefault(entry.title, entry.slug)

    @property
    def overrides(self) -> Tuple[SlugOverride, ...]:
        return self._overrides

    @classmethod
    def from_file(cls, path: Path) -> "Slugger":
        """
        Build a slugger from a JSON file of [{"slug": ..., "title": ...}].

        Raises:
            LibraryConfigError: If the file is missing or malformed
        """
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise LibraryConfigError(
                f"Slug override file not found: {path}",
                config_key="LIBRARY_SLUG_OVERRIDES",
                actual_value=str(path),
                cause=e,
            ) from e
        except json.JSONDecodeError as e:
            raise LibraryConfigError(
                f"Slug override file is not valid JSON: {path}",
                config_key="LIBRARY_SLUG_OVERRIDES",
                actual_value=str(path),
                cause=e,
            ) from e

        if not isinstance(raw, list):
            raise LibraryConfigError(
                "Slug override file must contain a list of {slug, title} objects",
                config_key="LIBRARY_SLUG_OVERRIDES",
                actual_value=str(path),
            )

        overrides: List[SlugOverride] = []
        for item in raw:
            if not isinstance(item, dict) or "slug" not in item or "title" not in item:
                raise LibraryConfigError(
                    f"Invalid slug override entry: {item!r}",
                    config_key="LIBRARY_SLUG_OVERRIDES",
                    actual_value=item,
                )
            overrides.append(SlugOverride(slug=str(item["slug"]), title=str(item["title"])))
        return cls(overrides)

    def slug_for_title(self, title: str) -> str:
        """Curated slug for a title if one exists, else the derived slug."""
        curated = self._by_title.get(title)
        if curated is not None:
            return curated
        return slugify(title)

    def resolve(self, slug: str, candidate_titles: Iterable[str]) -> str:
        """
        Resolve a slug to one of the candidate titles.

        The override table is tried first; derived lookup scans every
        candidate as the fallback.

        Raises:
            NotFoundError: If neither strategy matches
            AmbiguousSlugError: If several distinct titles derive the slug
        """
        titles = list(candidate_titles)

        override_title = self._by_slug.get(slug)
        if override_title is not None and override_title in titles:
            return override_title

        matches: List[str] = []
        for title in titles:
            if slugify(title) == slug and title not in matches:
                matches.append(title)

        if not matches:
            raise NotFoundError(
                f"Work not found: {slug}",
                resource="work",
                identifier=slug,
            )
        if len(matches) > 1:
            raise AmbiguousSlugError(
                f"Slug '{slug}' matches {len(matches)} works: {', '.join(matches)}",
                slug=slug,
                titles=matches,
            )
        return matches[0]

    def resolve_work(self, slug: str, works: Sequence[Work]) -> Work:
        """Resolve a slug to the first work carrying the matched title."""
        title = self.resolve(slug, (work.title for work in works))
        return next(work for work in works if work.title == title)
