"""Event attendance approval service."""
