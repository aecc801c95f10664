"""Deterministic conversion engine.

Pure numeric functions over resolved Unit values.
"""
