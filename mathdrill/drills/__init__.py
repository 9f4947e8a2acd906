"""Drill providers and question generation."""
