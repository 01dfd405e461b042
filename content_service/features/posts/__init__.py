"""Posts: post aggregates, engagement writes and post search."""
