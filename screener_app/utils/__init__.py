"""
Utility functions module.

Time Semantics:
- Bar timestamps from the provider are ALWAYS authoritative
- Wall-clock time is only used to anchor lookback windows and for
  freshness checks
- All timestamps are handled as aware UTC datetimes
"""
