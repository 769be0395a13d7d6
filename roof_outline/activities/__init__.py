"""Single-purpose pipeline steps.

Each activity performs one unit of work for the coordinator or the
drawing endpoint:
- fetch_imagery: Try imagery providers in order, first image wins
- validate_polygon: Area plausibility and drift-from-site checks
- save_drawing: Persist an operator drawing with its alignment transform
"""
