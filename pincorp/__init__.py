# pincorp/__init__.py
"""PIN Corp workshop console: materials, BOMs, production, products, sales and reports."""

__version__ = "1.0.0"
