"""
Core modules for the usage dashboard.

This package contains the functionality for normalizing usage events,
classifying providers, aggregating rollups and running a sync.
"""
