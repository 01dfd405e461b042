"""Users known to the content backend."""
