"""
Data models module.

Indicator bundles, evaluation input and per-cycle indicator snapshots.
"""
