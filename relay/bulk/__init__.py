"""Bulk-operation reroute pipeline."""
