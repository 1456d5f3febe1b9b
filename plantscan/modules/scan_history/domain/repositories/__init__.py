from .scan_history_repository import ScanHistoryRepository

__all__ = ["ScanHistoryRepository"]
