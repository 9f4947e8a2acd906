"""Adaptive policies: leveling and skill selection."""
