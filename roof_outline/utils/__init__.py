"""Shared helpers: geodesic math and blob path layout."""
