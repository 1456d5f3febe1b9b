"""
Core utilities package for PlantScan.
Provides exceptions, rate limiting and in-process locking.
"""
