"""
Favorites infrastructure layer.
"""
