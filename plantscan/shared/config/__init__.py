"""
Configuration package for PlantScan.
Settings, storage backend selection and cache key catalogue.
"""
