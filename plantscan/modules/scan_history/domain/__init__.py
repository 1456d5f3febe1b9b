"""
Scan history domain layer.
"""
