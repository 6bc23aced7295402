"""Adapters for storage, the live feed, configuration and the web interface."""
