"""Content service: topics, posts and engagement served from aggregate views."""
