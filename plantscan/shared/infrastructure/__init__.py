"""
Infrastructure adapters: key-value persistence and cache store.
"""
