"""
Theologos - Content Engine

Pure, synchronous functions over already-fetched domain entities:

- slugger: URL slug derivation and slug-to-work resolution
- navigator: locating units and pages in a work's unit tree
- content: outline labels and question/answer extraction
- proof_texts: clustering scripture citations into labeled proof texts

engine.library (the LibraryReader) is imported from its module directly;
it depends on the persistence layer, which itself depends on this package.
"""
from engine.content import (
    DISPLAY_LIMIT,
    ELLIPSIS,
    UnitDisplay,
    UnitText,
    display_source,
    parse_primary_secondary,
    parse_unit_display,
    truncate,
)
from engine.navigator import (
    UnitNavigation,
    addressable_count,
    children_of,
    default_unit_type,
    filter_units,
    find_page_by_position,
    find_unit_by_position,
    first_child_page,
    sibling_navigation,
    status_counts,
    top_level_units,
    total_page_count,
)
from engine.proof_texts import (
    group_proof_texts,
    join_citation,
    list_label,
    range_label,
    single_label,
    verse_text,
)
from engine.slugger import (
    DEFAULT_SLUG_OVERRIDES,
    SlugOverride,
    Slugger,
    slugify,
)

__all__ = [
    # Content
    "DISPLAY_LIMIT",
    "ELLIPSIS",
    "UnitDisplay",
    "UnitText",
    "display_source",
    "parse_primary_secondary",
    "parse_unit_display",
    "truncate",
    # Navigator
    "UnitNavigation",
    "addressable_count",
    "children_of",
    "default_unit_type",
    "filter_units",
    "find_page_by_position",
    "find_unit_by_position",
    "first_child_page",
    "sibling_navigation",
    "status_counts",
    "top_level_units",
    "total_page_count",
    # Proof texts
    "group_proof_texts",
    "join_citation",
    "list_label",
    "range_label",
    "single_label",
    "verse_text",
    # Slugs
    "DEFAULT_SLUG_OVERRIDES",
    "SlugOverride",
    "Slugger",
    "slugify",
]
