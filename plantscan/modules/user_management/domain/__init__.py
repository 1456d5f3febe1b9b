"""
User management domain layer.
"""
