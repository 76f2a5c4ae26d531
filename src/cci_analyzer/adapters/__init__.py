"""Adapters for wikis and reports."""
