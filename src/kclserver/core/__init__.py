"""Core utilities shared across kclserver modules."""
