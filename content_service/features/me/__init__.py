"""Listings scoped to the acting user."""
