"""Feature modules: topics, posts, users and metrics."""
