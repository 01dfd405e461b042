"""Topics: topic aggregates, follow relationships and topic search."""
