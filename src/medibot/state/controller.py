"""Top-level view state machine for the MediBot dashboard."""

import asyncio
import logging
from typing import Callable, Coroutine, Optional

from medibot.config import settings
from medibot.exceptions import MediBotError, SessionRequiredError
from medibot.schemas.prescription import AnalysisResult, HistoryEntry
from medibot.schemas.session import SessionContext, SessionUser, ViewState
from medibot.services.analysis import AnalysisClient
from medibot.services.auth import AuthClient
from medibot.services.history import HistoryClient
from medibot.services.profile import ProfileClient
from medibot.state.active_context import ActiveContextStore
from medibot.state.history import HistoryCache
from medibot.state.preferences import SettingsPanel
from medibot.state.profile import ProfileEditor, SaveOutcome
from medibot.state.upload import SelectedFile, UploadPipeline
from medibot.views.panels import ContextPanel

logger = logging.getLogger(__name__)


def _identity(user: Optional[SessionUser]) -> Optional[str]:
    if user is None:
        return None
    return user.id or user.email or user.name


class ViewController:
    """
    Selects which of scan / history / profile / settings is visible and wires
    user actions to the stores.

    State is flat: any view can be entered at any time and there is no back
    stack. View-scoped components (the upload pipeline on scan, the profile
    editor on profile) are created when their view is entered and dropped
    when it is left, so results that land after a view switch are discarded.

    The session is pushed in through ``update_session``. While it is not
    authenticated every user action raises ``SessionRequiredError``. The first
    time a session becomes authenticated the history cache is loaded, once.

    ``update_session`` schedules the history load on the running event loop
    and must be called from inside it.
    """

    def __init__(
        self,
        *,
        analysis: AnalysisClient,
        history: HistoryClient,
        profile: ProfileClient,
        redirect: Callable[[str], None],
        auth: Optional[AuthClient] = None,
    ):
        self._analysis = analysis
        self._profile_client = profile
        self._auth = auth
        self._redirect = redirect

        self.context = ActiveContextStore()
        self.history = HistoryCache(history, self.context, navigate=self.show)
        self.panel = ContextPanel(self.context)
        self.preferences = SettingsPanel()

        self.view = ViewState.SCAN
        self.session = SessionContext.loading()
        self.pipeline: Optional[UploadPipeline] = None
        self.profile_editor: Optional[ProfileEditor] = None

        self._history_owner: Optional[str] = None
        self._history_scheduled = False
        self._pending: set[asyncio.Task] = set()

    # ========================================================================
    # Session
    # ========================================================================

    @property
    def is_active(self) -> bool:
        return self.session.is_authenticated

    def update_session(self, session: SessionContext) -> None:
        previous = self.session
        self.session = session

        if session.status == "unauthenticated":
            if previous.status != "unauthenticated":
                self._suspend()
                self._end_history_session()
                logger.info("Session is not authenticated, redirecting to %s", settings.login_url)
                self._redirect(settings.login_url)
            return

        if session.status == "loading":
            if previous.is_authenticated:
                self._suspend()
            return

        owner = _identity(session.user)
        switched = self._history_scheduled and owner != self._history_owner
        if switched:
            logger.info("Signed-in account changed, starting a new session")
            self._suspend()
            self._end_history_session()

        if switched or not previous.is_authenticated:
            self._mount(self.view)

        if not self._history_scheduled:
            self._history_scheduled = True
            self._history_owner = owner
            self._spawn(self.history.load())

    async def sync_session(self) -> SessionContext:
        """Ask the auth collaborator for the current session and apply it."""
        if self._auth is None:
            raise MediBotError("No auth collaborator configured")
        try:
            session = await self._auth.session_status()
        except MediBotError as e:
            logger.warning("Session check failed, keeping %s: %s", self.session.status, e.detail)
            return self.session
        self.update_session(session)
        return session

    async def sign_out(self) -> None:
        self._require_session()
        if self._auth is not None:
            try:
                await self._auth.sign_out()
            except MediBotError as e:
                logger.warning("Sign-out request failed: %s", e.detail)
        self.update_session(SessionContext.anonymous())

    def _end_history_session(self) -> None:
        self.history.reset()
        self.context.clear()
        self._history_scheduled = False
        self._history_owner = None

    # ========================================================================
    # Navigation
    # ========================================================================

    def show(self, view: ViewState) -> None:
        """Enter ``view`` directly. Re-selecting the current view does nothing."""
        self._require_session()
        view = ViewState(view)
        if view is self.view:
            return
        self._unmount(self.view)
        logger.debug("View %s -> %s", self.view.value, view.value)
        self.view = view
        self._mount(view)

    def _mount(self, view: ViewState) -> None:
        if view is ViewState.SCAN:
            self.pipeline = UploadPipeline(self._analysis, self.context)
        elif view is ViewState.PROFILE:
            self.profile_editor = ProfileEditor.from_session(
                self._profile_client, self.session.user
            )

    def _unmount(self, view: ViewState) -> None:
        if view is ViewState.SCAN and self.pipeline is not None:
            self.pipeline.unmount()
            self.pipeline = None
        elif view is ViewState.PROFILE and self.profile_editor is not None:
            self.profile_editor.discard()
            self.profile_editor = None

    def _suspend(self) -> None:
        self._unmount(self.view)

    # ========================================================================
    # User actions
    # ========================================================================

    async def upload(self, file: SelectedFile) -> Optional[AnalysisResult]:
        """Select and submit a prescription photo from the scan view."""
        self._require_session()
        if self.pipeline is None:
            raise MediBotError("Uploads are only available on the scan view")
        return await self.pipeline.upload(file)

    def select_history_entry(self, entry: HistoryEntry) -> AnalysisResult:
        """Replay an archived analysis; always lands on the scan view."""
        self._require_session()
        return self.history.select(entry)

    def clear_context(self) -> None:
        self._require_session()
        self.context.clear()

    async def refresh_history(self):
        self._require_session()
        return await self.history.refresh()

    async def submit_profile(self) -> SaveOutcome:
        self._require_session()
        if self.profile_editor is None:
            raise MediBotError("The profile editor is only available on the profile view")
        return await self.profile_editor.save()

    # ========================================================================
    # Background work
    # ========================================================================

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def settle(self) -> None:
        """Wait for scheduled background work (history loads) to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _require_session(self) -> None:
        if not self.session.is_authenticated:
            raise SessionRequiredError(
                f"Session is {self.session.status}; sign in to continue"
            )
