"""
Site Monitor - shared utilities (logging, helpers, validators).
"""
