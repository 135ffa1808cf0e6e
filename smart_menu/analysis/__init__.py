"""
Dish analysis layer.

Responsibilities:
- Hold the fixed keyword vocabularies used to read recipe text.
- Turn a raw catalog record into a structured ``DishAnalysis``.
- Estimate calories offline from ingredient quantities.
"""
