"""Identify trivial diffs in Wikipedia contributor copyright investigations."""
