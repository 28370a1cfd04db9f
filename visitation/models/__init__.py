"""Domain records and input models."""
