"""
Theologos - Property-Based Testing Suite

Hypothesis tests for slug derivation and proof-text grouping invariants.
"""
