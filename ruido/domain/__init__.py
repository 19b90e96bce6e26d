"""Domain services for track search and track writes."""
