"""
Editor session - unsaved-changes tracking and autosave for one ad proof.

States:
    CLEAN   draft equals the baseline (last loaded or saved content)
    DIRTY   draft differs from the baseline
    SAVING  a version append is in flight

Transitions:
    CLEAN  --edit-->            DIRTY   (arms the autosave timer)
    DIRTY  --edit back-->       CLEAN   (cancels the timer)
    DIRTY  --save / timer-->    SAVING
    SAVING --success-->         CLEAN   (baseline = saved content)
    SAVING --failure-->         DIRTY   (draft kept, on_error called, timer re-armed
                                         only for edits made during the save)
    SAVING --discard-->         CLEAN once the save settles (draft = saved content,
                                         or the old baseline if the save failed)

While DIRTY, navigation must be confirmed with one of CANCEL, DISCARD or
SAVE_AND_LEAVE, and closing the page should prompt (confirm_before_unload).
"""

import asyncio
import copy
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from ..core.config import Config
from ..services.ad_proof_service import AdProofService
from ..services.models import AdProofVersion

logger = logging.getLogger(__name__)

SaveFn = Callable[[Dict[str, Any]], Awaitable[Any]]


class EditorState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"


class NavigationChoice(str, Enum):
    CANCEL = "cancel"
    DISCARD = "discard"
    SAVE_AND_LEAVE = "save_and_leave"


class EditorSession:
    """
    In-memory draft of an ad proof's content with autosave.

    Args:
        content: Content of the version being edited (becomes the baseline).
        save_fn: Coroutine function persisting a content payload as a new version.
        autosave_interval: Seconds of continued dirtiness before autosaving
            (default Config.AUTOSAVE_INTERVAL_SECONDS).
        on_saved: Called with save_fn's result after each successful save.
        on_error: Called with the exception when a save fails.
    """

    def __init__(
        self,
        content: Dict[str, Any],
        save_fn: SaveFn,
        autosave_interval: Optional[float] = None,
        on_saved: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self._baseline = copy.deepcopy(content)
        self._draft = copy.deepcopy(content)
        self._save_fn = save_fn
        self.autosave_interval = (
            Config.AUTOSAVE_INTERVAL_SECONDS if autosave_interval is None else autosave_interval
        )
        self._on_saved = on_saved
        self._on_error = on_error
        self._state = EditorState.CLEAN
        self._timer: Optional[asyncio.Task] = None
        self._pending_navigation: Optional[str] = None
        # Set when the draft is discarded while a save is in flight
        self._discard_on_settle = False

    @classmethod
    def for_ad_proof(
        cls,
        service: AdProofService,
        ad_proof_id: str,
        **kwargs,
    ) -> "EditorSession":
        """Open the current version of an ad proof; saves append new versions."""
        proof = service.get_ad_proof(ad_proof_id)
        version = service.get_current_version(proof)

        async def save(content: Dict[str, Any]) -> AdProofVersion:
            return await asyncio.to_thread(service.append_version, ad_proof_id, content)

        return cls(version.ad_data, save, **kwargs)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def draft(self) -> Dict[str, Any]:
        return copy.deepcopy(self._draft)

    @property
    def baseline(self) -> Dict[str, Any]:
        return copy.deepcopy(self._baseline)

    @property
    def is_dirty(self) -> bool:
        return self._state == EditorState.DIRTY

    @property
    def autosave_armed(self) -> bool:
        return self._timer is not None and not self._timer.done()

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def set_field(self, key: str, value: Any) -> None:
        self._draft[key] = copy.deepcopy(value)
        self._after_edit()

    def remove_field(self, key: str) -> None:
        self._draft.pop(key, None)
        self._after_edit()

    def replace(self, content: Dict[str, Any]) -> None:
        self._draft = copy.deepcopy(content)
        self._after_edit()

    def discard_changes(self) -> None:
        """
        Drop the draft and go back to the baseline.

        During a save the draft follows whatever that save settles on: the
        saved content if it succeeds, the old baseline if it fails.
        """
        self._draft = copy.deepcopy(self._baseline)
        self._cancel_timer()
        if self._state == EditorState.SAVING:
            self._discard_on_settle = True
        else:
            self._state = EditorState.CLEAN

    def _after_edit(self) -> None:
        if self._state == EditorState.SAVING:
            # Settled when the in-flight save completes
            self._discard_on_settle = False
            return
        if self._draft == self._baseline:
            self._state = EditorState.CLEAN
            self._cancel_timer()
        else:
            self._state = EditorState.DIRTY
            self._arm_timer()

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    async def save(self) -> Optional[Any]:
        """
        Persist the draft as a new version.

        Returns:
            save_fn's result, or None if there was nothing to save, a save was
            already in flight, or the save failed (on_error is called).
        """
        if self._state != EditorState.DIRTY:
            return None

        self._cancel_timer()
        snapshot = copy.deepcopy(self._draft)
        self._state = EditorState.SAVING
        self._discard_on_settle = False
        try:
            result = await self._save_fn(snapshot)
        except Exception as e:
            discarded, self._discard_on_settle = self._discard_on_settle, False
            if discarded:
                logger.warning(f"Save failed after the draft was discarded: {e}")
                self._state = EditorState.CLEAN
            else:
                logger.warning(f"Save failed, keeping unsaved draft: {e}")
                self._state = EditorState.CLEAN if self._draft == self._baseline else EditorState.DIRTY
                if self._state == EditorState.DIRTY and self._draft != snapshot:
                    # Edits made during the failed save still need an autosave
                    self._arm_timer()
            if self._on_error:
                self._on_error(e)
            return None

        self._baseline = snapshot
        discarded, self._discard_on_settle = self._discard_on_settle, False
        if discarded:
            self._draft = copy.deepcopy(snapshot)
        if self._draft == self._baseline:
            self._state = EditorState.CLEAN
        else:
            self._state = EditorState.DIRTY
            self._arm_timer()
        if self._on_saved:
            self._on_saved(result)
        return result

    def _arm_timer(self) -> None:
        if self.autosave_armed:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; autosave disabled for this edit")
            return
        self._timer = loop.create_task(self._autosave_after(self.autosave_interval))

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None and not timer.done() and timer is not asyncio.current_task():
            timer.cancel()

    async def _autosave_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._timer = None
        if self._state == EditorState.DIRTY:
            logger.info("Autosaving draft")
            await self.save()

    # ------------------------------------------------------------------
    # Navigation guard
    # ------------------------------------------------------------------

    def request_navigation(self, target: str) -> bool:
        """
        Ask to leave the editor.

        Returns:
            True if navigation may proceed now. False if there are unsaved
            changes; call resolve_navigation with the user's choice.
        """
        if self._state != EditorState.DIRTY:
            return True
        self._pending_navigation = target
        return False

    @property
    def pending_navigation(self) -> Optional[str]:
        return self._pending_navigation

    async def resolve_navigation(self, choice: NavigationChoice) -> Optional[str]:
        """
        Apply the user's choice for a blocked navigation.

        Returns:
            The target to navigate to, or None to stay in the editor.
        """
        target, self._pending_navigation = self._pending_navigation, None
        if target is None:
            return None

        choice = NavigationChoice(choice)
        if choice == NavigationChoice.CANCEL:
            return None
        if choice == NavigationChoice.DISCARD:
            self.discard_changes()
            return target

        await self.save()
        if self._state == EditorState.DIRTY:
            # Save failed; stay so the draft is not lost
            return None
        return target

    def confirm_before_unload(self) -> bool:
        """True if closing or reloading the page should ask for confirmation."""
        return self._state == EditorState.DIRTY

    async def close(self) -> None:
        """Stop the autosave timer."""
        self._cancel_timer()
