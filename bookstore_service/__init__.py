"""Bookstore query service: fixed MongoDB queries over the ``books`` collection."""
