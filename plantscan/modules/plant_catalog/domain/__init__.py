"""
Plant catalog domain layer.
"""
