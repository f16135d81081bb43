"""
Shared

Types used across the query and adapter layers.
"""
