"""Chat-to-reMarkable PDF bridge service."""
