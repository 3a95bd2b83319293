"""
Theologos - Proof Text Clustering

Groups a unit's scripture citations into labeled proof texts.

Citations are put in canonical order, then scanned once. A group stays
open while citations remain in the same book and chapter; a verse gap
never closes it, only a chapter or book change does. Labels:

    Romans 8:28, 8:29, 8:30   ->  "Romans 8:28-30"
    John 3:16, 3:18           ->  "John 3:16, 18"
    Genesis 1:1, Romans 8:28  ->  "Genesis 1:1" | "Romans 8:28"
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from domain.entities import (
    BibleBook,
    BibleVerse,
    Chapter,
    Citation,
    ProofTextGroup,
    TextSegment,
)


def verse_text(segments: Iterable[TextSegment], translation: str) -> str:
    """
    Text of a verse in one translation.

    Matching segments are joined with single spaces in the order given;
    no match yields an empty string.
    """
    return " ".join(
        segment.content_text
        for segment in segments
        if segment.translation_abbreviation == translation
    )


def join_citation(
    verse: BibleVerse,
    chapter: Chapter,
    book: BibleBook,
    translation: str,
) -> Citation:
    """Flatten a cited verse and its chapter and book into a Citation."""
    return Citation(
        book=book.canonical_name,
        chapter=chapter.chapter_number,
        verse=verse.verse_number,
        text=verse_text(verse.text_segments, translation),
        canonical_order_index=verse.canonical_order_index,
    )


def single_label(citation: Citation) -> str:
    return f"{citation.book} {citation.chapter}:{citation.verse}"


def range_label(citations: Sequence[Citation]) -> str:
    """Label running from the first citation's verse to the last one's."""
    first = citations[0]
    last_verse = citations[-1].verse
    suffix = f"-{last_verse}" if last_verse > first.verse else ""
    return f"{single_label(first)}{suffix}"


def list_label(citations: Sequence[Citation]) -> str:
    """Label listing every verse in insertion order, not deduplicated."""
    last = citations[-1]
    verses = ", ".join(str(citation.verse) for citation in citations)
    return f"{last.book} {last.chapter}:{verses}"


class _OpenGroup:
    """Mutable group used only while scanning."""

    __slots__ = ("label", "citations")

    def __init__(self, citation: Citation):
        self.label = single_label(citation)
        self.citations: List[Citation] = [citation]

    def freeze(self) -> ProofTextGroup:
        return ProofTextGroup(
            display_text=self.label,
            references=tuple(citation.to_reference() for citation in self.citations),
        )


def group_proof_texts(citations: Iterable[Citation]) -> List[ProofTextGroup]:
    """
    Partition citations into proof-text groups.

    Output order and membership are fully determined by
    canonical_order_index; nothing is re-sorted after the initial sort.
    """
    ordered = sorted(citations, key=lambda citation: citation.canonical_order_index)

    groups: List[_OpenGroup] = []
    current: Optional[_OpenGroup] = None

    for citation in ordered:
        if current is None:
            current = _OpenGroup(citation)
            groups.append(current)
            continue

        last = current.citations[-1]
        same_chapter = last.book == citation.book and last.chapter == citation.chapter
        consecutive = same_chapter and last.verse == citation.verse - 1

        if consecutive or same_chapter:
            current.citations.append(citation)
            if consecutive:
                current.label = range_label(current.citations)
            else:
                current.label = list_label(current.citations)
        else:
            current = _OpenGroup(citation)
            groups.append(current)

    return [group.freeze() for group in groups]
