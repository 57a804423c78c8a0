"""Audience data providers for the Lead Quality pipeline."""
