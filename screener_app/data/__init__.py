"""
Data ingestion and normalization module.

Canonical bar and alert models, provider/alert payload parsers and bar
sequence validation.
"""
