# 📄 File: plantscan/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Marks the 'plantscan' folder as our app's offline data package and records
# its version and package information.
#
# 🧪 Purpose (Technical Summary):
# Package initialization with version metadata for the PlantScan on-device
# data layer (cache store, scan rate limiter, local collections).
#
# 🔗 Dependencies:
# - Python packaging system
#
# 🔄 Connected Modules / Calls From:
# - Application bootstrap code
# - Packaging metadata

"""
PlantScan - Offline Data Layer

Local persistence, timestamped caching, daily scan limits and user-owned
collections (favorites, scan history, detected diseases) for the PlantScan
plant identification app.
"""

__version__ = "1.0.0"
__title__ = "PlantScan Data Layer"
__description__ = "Offline cache and local storage for plant scanning"
__author__ = "PlantScan Team"
__author_email__ = "dev@plantscan.app"
__license__ = "MIT"

__all__ = [
    "__version__",
    "__title__",
    "__description__",
    "__author__",
    "__author_email__",
    "__license__",
]
