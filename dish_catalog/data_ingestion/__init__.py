"""
Dataset conversion for the dish catalog.

Responsibilities:
- Read the tabular dish source (CSV with a header row and quoted fields).
- Normalize rows into the canonical Dish record shape.
- Persist the collection as ``dishes.json`` for the record store.
"""
