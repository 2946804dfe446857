"""Shared helpers that are not specific to posting weather."""
