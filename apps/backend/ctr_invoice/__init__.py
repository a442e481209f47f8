"""CTR invoice tagging service."""
