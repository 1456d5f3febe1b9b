# 📄 File: plantscan/modules/scan_history/application/scan_service.py
# 🧭 Purpose (Layman Explanation):
# Runs one plant scan from start to finish: checks the user still has scans left today,
# counts the scan, asks the AI what is wrong with the plant, and saves the result
# 🧪 Purpose (Technical Summary):
# Application service composing DailyRateLimiter, the disease analyzer, scan history
# repositories, the uploads collection and the user data repository into the scan workflow
# 🔗 Dependencies:
# DailyRateLimiter, ScanHistoryRepository, UploadsRepository, UserDataRepository, AuthProvider
# 🔄 Connected Modules / Calls From:
# plantscan.main (application container), scan screen

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Protocol

from pydantic import ValidationError as ModelValidationError

from plantscan.modules.user_management.application.auth import AuthProvider
from plantscan.modules.user_management.domain.models import CurrentUser
from plantscan.modules.user_management.domain.repositories import (
    UploadsRepository,
    UserDataRepository,
)
from plantscan.shared.core.exceptions import (
    ScanAnalysisError,
    ScanLimitExceededError,
    StorageError,
)
from plantscan.shared.core.rate_limiter import DailyRateLimiter, UsageInfo
from plantscan.shared.utils.helpers import utc_now
from plantscan.shared.utils.logging import get_logger

from ..domain.models.scan_entry import ScanEntry, ScanStatus
from ..domain.repositories.scan_history_repository import ScanHistoryRepository

logger = get_logger(__name__)


class DiseaseAnalyzer(Protocol):
    """AI disease detection backend."""

    async def analyze(self, image_uri: str) -> Mapping[str, Any]:
        """
        Analyze one image.

        Returns:
            Mapping with "predictions" (list of dicts carrying class_name and
            confidence) and optionally "status"
        """
        ...


class AnalyzerReportedError(Exception):
    """The analyzer answered, but with an error status."""


@dataclass
class ScanOutcome:
    """A saved scan plus the remaining daily budget."""
    entry: ScanEntry
    remaining: int
    used: int
    limit: int


class ScanService:
    """
    Scan workflow.

    The daily budget is consumed before analysis starts, so a scan that
    fails in the analyzer still counts against today's limit. Signed-in
    scans also get an upload record that moves from pending to the final
    scan status.
    """

    def __init__(
        self,
        limiter: DailyRateLimiter,
        history: ScanHistoryRepository,
        analyzer: DiseaseAnalyzer,
        user_data: Optional[UserDataRepository] = None,
        auth: Optional[AuthProvider] = None,
        user_history_factory: Optional[Callable[[str], ScanHistoryRepository]] = None,
        uploads_factory: Optional[Callable[[str], UploadsRepository]] = None,
        now: Callable[[], datetime] = utc_now
    ):
        self.limiter = limiter
        self.history = history
        self.analyzer = analyzer
        self.user_data = user_data
        self.auth = auth
        self.user_history_factory = user_history_factory
        self.uploads_factory = uploads_factory
        self.now = now

    def _current_user(self) -> Optional[CurrentUser]:
        return self.auth.get_current_user() if self.auth else None

    async def get_usage(self) -> UsageInfo:
        return await self.limiter.get_usage_info()

    async def get_history(self) -> List[ScanEntry]:
        return await self.history.get_all()

    async def _save_entry(self, entry: ScanEntry, user: Optional[CurrentUser]):
        repositories = [self.history]
        if user is not None and self.user_history_factory is not None:
            repositories.append(self.user_history_factory(user.user_id))

        for repository in repositories:
            try:
                await repository.append(entry)
            except StorageError as e:
                logger.error(f"Error saving scan to history: {e}", scan_id=entry.id)

    async def _record_diseases(self, user: Optional[CurrentUser], predictions: List[Mapping[str, Any]]):
        if user is None or self.user_data is None:
            return

        try:
            await self.user_data.record_scan(user.user_id, predictions)
        except (StorageError, ModelValidationError) as e:
            logger.error(f"Error updating user document: {e}", user_id=user.user_id)

    async def _start_upload(
        self,
        user: Optional[CurrentUser],
        image_uri: str,
        upload_id: Optional[str]
    ) -> Optional[str]:
        if user is None or self.uploads_factory is None:
            return upload_id

        try:
            upload = await self.uploads_factory(user.user_id).create({
                "id": upload_id,
                "image_uri": image_uri,
            })
        except StorageError as e:
            logger.error(f"Error creating upload record: {e}", user_id=user.user_id)
            return upload_id
        return upload.id

    async def _finish_upload(
        self,
        user: Optional[CurrentUser],
        upload_id: Optional[str],
        entry: ScanEntry
    ):
        if user is None or self.uploads_factory is None or upload_id is None:
            return

        try:
            await self.uploads_factory(user.user_id).update(upload_id, {
                "status": entry.status.value,
                "scan_id": entry.id,
                "predictions": entry.predictions,
            })
        except StorageError as e:
            logger.error(f"Error updating upload record: {e}", upload_id=upload_id)

    def _analyzed_entry(
        self,
        result: Mapping[str, Any],
        image_uri: str,
        upload_id: Optional[str]
    ) -> ScanEntry:
        reported = result.get("status")
        status = ScanStatus.from_reported(reported)
        if reported is not None and status != reported:
            logger.warning(f"Unknown analyzer status {reported!r}, saving scan as complete")
        if status is ScanStatus.ERROR:
            raise AnalyzerReportedError(result.get("error") or "Analyzer reported an error")

        return ScanEntry(
            predictions=list(result.get("predictions") or []),
            image_uri=image_uri,
            upload_id=upload_id,
            timestamp=self.now(),
            status=status
        )

    async def scan(self, image_uri: str, upload_id: Optional[str] = None) -> ScanOutcome:
        """
        Run one scan.

        Args:
            image_uri: Location of the captured image
            upload_id: Identifier of the uploaded image, if any

        Returns:
            ScanOutcome with the saved entry and today's remaining budget

        Raises:
            ScanLimitExceededError: If today's budget is used up
            ScanAnalysisError: If the analyzer fails or answers with an
                unusable payload (an error entry is still saved)
        """
        status = await self.limiter.can_proceed()
        if not status.allowed:
            logger.warning("Daily scan limit reached", used=status.used, limit=status.limit)
            raise ScanLimitExceededError(status.limit, status.reset_time)

        usage = await self.limiter.increment()
        if not usage.success:
            raise ScanLimitExceededError(usage.limit, self.limiter.get_reset_time())

        user = self._current_user()
        upload_id = await self._start_upload(user, image_uri, upload_id)

        try:
            result = await self.analyzer.analyze(image_uri)
            entry = self._analyzed_entry(result, image_uri, upload_id)
        except Exception as e:
            logger.error(f"Plant analysis failed: {e}", exc_info=True)
            entry = ScanEntry(
                image_uri=image_uri,
                upload_id=upload_id,
                timestamp=self.now(),
                status=ScanStatus.ERROR,
                error=str(e)
            )
            await self._save_entry(entry, user)
            await self._finish_upload(user, upload_id, entry)
            raise ScanAnalysisError(
                message=f"Plant analysis failed: {e}",
                scan_id=entry.id,
                reason=type(e).__name__
            ) from e

        await self._save_entry(entry, user)
        await self._finish_upload(user, upload_id, entry)
        await self._record_diseases(user, entry.predictions)

        logger.info(
            f"Scan {entry.id} complete",
            predictions=len(entry.predictions),
            remaining=usage.remaining
        )
        return ScanOutcome(
            entry=entry,
            remaining=usage.remaining,
            used=usage.used,
            limit=usage.limit
        )
