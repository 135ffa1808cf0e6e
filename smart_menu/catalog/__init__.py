"""
Recipe catalog layer.

Responsibilities:
- Map meal occasions and dietary restrictions to catalog categories.
- Fetch candidate recipes from TheMealDB under per-call timeouts.
- Provide the curated fallback dishes used when the catalog is unavailable.
"""
