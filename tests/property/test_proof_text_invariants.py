"""
Property-Based Tests for Proof-Text Grouping
"""
from collections import Counter

from hypothesis import given, settings

from engine.proof_texts import group_proof_texts
from tests.property.strategies import citation_list_strategy


def as_key(reference):
    return (reference.book, reference.chapter, reference.verse)


class TestGroupingInvariants:
    """Invariants of group_proof_texts over arbitrary citation lists."""

    @given(citation_list_strategy())
    @settings(max_examples=300)
    def test_every_citation_appears_once(self, citations):
        groups = group_proof_texts(citations)
        grouped = [as_key(ref) for group in groups for ref in group.references]
        assert Counter(grouped) == Counter(
            (c.book, c.chapter, c.verse) for c in citations
        )

    @given(citation_list_strategy())
    @settings(max_examples=300)
    def test_output_follows_canonical_order(self, citations):
        ordered = sorted(citations, key=lambda c: c.canonical_order_index)
        groups = group_proof_texts(citations)
        grouped = [as_key(ref) for group in groups for ref in group.references]
        assert grouped == [(c.book, c.chapter, c.verse) for c in ordered]

    @given(citation_list_strategy())
    @settings(max_examples=300)
    def test_groups_are_single_chapter_and_maximal(self, citations):
        groups = group_proof_texts(citations)
        chapters = [
            {(ref.book, ref.chapter) for ref in group.references}
            for group in groups
        ]
        assert all(len(chapter) == 1 for chapter in chapters)
        # A chapter never spans two groups
        flattened = [next(iter(chapter)) for chapter in chapters]
        assert len(flattened) == len(set(flattened))

    @given(citation_list_strategy(min_size=1))
    @settings(max_examples=300)
    def test_label_starts_at_first_verse(self, citations):
        for group in group_proof_texts(citations):
            first = group.references[0]
            assert group.display_text.startswith(f"{first.book} {first.chapter}:{first.verse}")

    @given(citation_list_strategy(min_size=1))
    @settings(max_examples=300)
    def test_label_form_matches_verse_spacing(self, citations):
        for group in group_proof_texts(citations):
            verses = [ref.verse for ref in group.references]
            first = group.references[0]
            prefix = f"{first.book} {first.chapter}:"
            if len(verses) == 1:
                assert group.display_text == f"{prefix}{verses[0]}"
            elif verses[-1] - verses[-2] == 1:
                assert group.display_text == f"{prefix}{verses[0]}-{verses[-1]}"
            else:
                assert group.display_text == prefix + ", ".join(str(v) for v in verses)
