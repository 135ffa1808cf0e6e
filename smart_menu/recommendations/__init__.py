"""
Dish recommendation pipeline.

Responsibilities:
- Derive the time-of-day context and the occasion for a request.
- Filter catalog candidates against hard and soft user constraints.
- Score candidates with occasion-specific weight tables.
- Select one dish (weighted roulette) or a category-diverse set.
- Fall back through curated and emergency dishes so every call returns a result.
"""
