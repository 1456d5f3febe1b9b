# 📄 File: plantscan/shared/utils/helpers.py

# 🧭 Purpose (Layman Explanation):
# Small shared shortcuts, like getting the current time in one consistent way
# and giving every scan a unique name.

# 🧪 Purpose (Technical Summary):
# Time and identifier helpers shared by domain repositories and services.

# 🔗 Dependencies:
# - datetime: UTC timestamps
# - uuid: Unique identifier generation

# 🔄 Connected Modules / Calls From:
# Used by: favorites, scan history and user data repositories, ScanService

from datetime import datetime, timezone
from uuid import uuid4


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def generate_id(prefix: str = "", length: int = 12) -> str:
    """
    Generate a unique identifier with optional prefix.

    Args:
        prefix: Optional prefix for the ID
        length: Length of the random part

    Returns:
        Generated unique ID, e.g. 'scan_3f9a0c1b2d4e'
    """
    random_part = uuid4().hex[:length]
    return f"{prefix}_{random_part}" if prefix else random_part
