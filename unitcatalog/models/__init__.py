"""Unit catalog domain models."""
