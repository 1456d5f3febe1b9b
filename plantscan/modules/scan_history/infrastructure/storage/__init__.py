from .scan_history_repository_impl import StorageScanHistoryRepository, scan_history_key

__all__ = ["StorageScanHistoryRepository", "scan_history_key"]
