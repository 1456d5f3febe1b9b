"""
Scan history infrastructure layer.
"""
