"""
Plant catalog module: cached plant list and user location with offline fallback.
"""
