from .scan_service import DiseaseAnalyzer, ScanOutcome, ScanService

__all__ = ["DiseaseAnalyzer", "ScanOutcome", "ScanService"]
