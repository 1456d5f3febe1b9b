from .scan_entry import ScanEntry, ScanStatus

__all__ = ["ScanEntry", "ScanStatus"]
