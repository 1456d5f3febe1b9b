"""
Favorites module: user-owned favorite plants stored as one document.
"""
