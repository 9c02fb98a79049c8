"""Bookstore: a small CRUD HTTP service for books."""
