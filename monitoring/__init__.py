"""Core (UI-agnostic) monitoring dashboard logic.

This package contains:
- sheet fetching (Google Sheets values API -> rows of strings)
- header schema mapping and row filtering
- per-source aggregation (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
