"""Fetch gating and job registry."""
