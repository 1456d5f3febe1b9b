"""
Favorites domain layer.
"""
