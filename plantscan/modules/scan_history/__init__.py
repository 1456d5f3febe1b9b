"""
Scan history module: capped, newest-first record of plant scans.
"""
