"""Domain models for call records and reports."""
