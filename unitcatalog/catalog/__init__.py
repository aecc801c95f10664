"""Unit catalog loading, validation and lookup.

The global partition is read from bundled JSON documents; project
partitions come from a pluggable asynchronous source.
"""
