"""Search-results page driving, extraction and aggregation."""
