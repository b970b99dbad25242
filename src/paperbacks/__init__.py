"""Paperbacks: narrative traversal engine for branching interactive fiction."""
