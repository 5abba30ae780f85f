"""
Ranking engine.

Modules
-------
scorer     : Bayesian rating, log popularity, item and group score components.
dedupe     : Consecutive-name collapse and per-name caps.
ranker     : Grouping by category level and group ordering.
hospitals  : Per-hospital rating summaries.
filters    : Category, planner-category and keyword pre-filters.
procedures : Per-name procedure ranking with price and discount.
"""
