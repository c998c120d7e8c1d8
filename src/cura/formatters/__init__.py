"""Output formatters for patient records."""
