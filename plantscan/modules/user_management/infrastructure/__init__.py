"""
User management infrastructure layer.
"""
