# 📄 File: plantscan/modules/user_management/application/auth.py
# 🧭 Purpose (Layman Explanation):
# Tells the rest of the app who is signed in right now, if anyone
# 🧪 Purpose (Technical Summary):
# AuthProvider protocol consumed by services, plus an in-process session provider that
# keeps the signed-in flag in AppFlags and binds the user and session ids into the log context
# 🔗 Dependencies:
# typing, AppFlags, logging context
# 🔄 Connected Modules / Calls From:
# ScanService, PlantCatalogService, plantscan.main

from typing import Optional, Protocol

from plantscan.shared.core.exceptions import NotAuthenticatedError
from plantscan.shared.utils.helpers import generate_id
from plantscan.shared.utils.logging import get_logger, session_id_var, user_id_var

from ..domain.models.user_data import CurrentUser
from ..infrastructure.storage.app_flags import AppFlags

logger = get_logger(__name__)


class AuthProvider(Protocol):
    """Source of the currently signed-in user."""

    def get_current_user(self) -> Optional[CurrentUser]:
        ...


class SessionAuthProvider:
    """
    Holds the signed-in user for this process.

    Credential checks happen elsewhere; this only records the outcome.
    """

    def __init__(self, flags: AppFlags):
        self.flags = flags
        self._current_user: Optional[CurrentUser] = None
        self.session_id: Optional[str] = None

    def get_current_user(self) -> Optional[CurrentUser]:
        return self._current_user

    def require_user(self, operation: Optional[str] = None) -> CurrentUser:
        """
        The signed-in user.

        Raises:
            NotAuthenticatedError: If nobody is signed in
        """
        if self._current_user is None:
            raise NotAuthenticatedError(operation=operation)
        return self._current_user

    def update_profile(self, **changes) -> Optional[CurrentUser]:
        """Apply profile changes to the signed-in user; no-op for guests."""
        if self._current_user is None:
            return None
        self._current_user = self._current_user.model_copy(update=changes)
        return self._current_user

    async def sign_in(self, user: CurrentUser):
        self._current_user = user
        self.session_id = generate_id("session")
        user_id_var.set(user.user_id)
        session_id_var.set(self.session_id)
        await self.flags.set_logged_in(True)
        logger.log_user_action("sign_in", user.user_id)

    async def sign_out(self):
        user = self._current_user
        self._current_user = None
        self.session_id = None
        user_id_var.set("")
        session_id_var.set("")
        await self.flags.set_logged_in(False)
        if user is not None:
            logger.log_user_action("sign_out", user.user_id)
