"""Unit-of-measure catalog and conversion service.

Loads a validated catalog of units and unit systems, indexes it for lookup
by externalId, quantity, alias and system, and converts values between
units of the same quantity.
"""
