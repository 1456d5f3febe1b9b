"""
Shared utility helpers: logging and formatting.
"""
