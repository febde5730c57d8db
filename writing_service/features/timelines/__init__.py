"""Timelines feature: per-user review timelines of a document's versions."""
