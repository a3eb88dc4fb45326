"""Stash snapshot construction, storage and restoration."""
