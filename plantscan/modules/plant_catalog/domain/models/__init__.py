from .catalog import CatalogLoadResult, CatalogSource, LocationLoadResult, Notice, NoticeType

__all__ = ["CatalogLoadResult", "CatalogSource", "LocationLoadResult", "Notice", "NoticeType"]
