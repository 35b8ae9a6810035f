# src/person_tasks/__init__.py

"""Person/Task records over a document store: console commands and a small REST API."""

__version__ = "0.1.0"
