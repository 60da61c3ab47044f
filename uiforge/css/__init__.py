"""Stylesheet mapping, CSS module parsing and cascade merging."""
