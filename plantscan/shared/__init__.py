# 📄 File: plantscan/shared/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Marks the 'shared' folder as a package of common tools every part of the
# app uses, like storage, caching and the daily scan counter.
#
# 🧪 Purpose (Technical Summary):
# Shared kernel package for configuration, persistence adapters, the
# timestamped cache store, rate limiting, exceptions and logging.
#
# 🔗 Dependencies:
# - Python packaging system
#
# 🔄 Connected Modules / Calls From:
# - All feature modules under plantscan.modules

"""
Shared Kernel - Common Utilities and Infrastructure

- Configuration management
- Key-value persistence adapters
- Timestamped cache store
- Daily rate limiting
- Exceptions and logging utilities
"""

__all__ = []
