"""Prompts feature: prompt templates and recorded prompt runs."""
