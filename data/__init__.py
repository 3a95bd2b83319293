"""
Theologos - Data Module

JSON corpus format and loaders.

- schemas.py: pydantic models for corpus files
- loaders.py: corpus file -> domain entities -> repository
"""
from data.loaders import Corpus, load_corpus, parse_corpus, read_corpus
from data.schemas import CorpusFile, canonical_order_index

__all__ = [
    "Corpus",
    "CorpusFile",
    "canonical_order_index",
    "load_corpus",
    "parse_corpus",
    "read_corpus",
]
