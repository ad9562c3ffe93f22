"""
Session Controller for Multilingual Tutor
Busy-flag state machine around one inference request at a time
"""

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from .errors import InferenceError
from .llm_processor import InferenceResult, LLMProcessor
from .models import GrammarSession, HistoryEntry, Mode, TranslateSession
from .prompt_builder import build_prompt
from .response_parser import extract_primary_translation
from .session_manager import HistoryStore, Workspace


class RequestState(str, Enum):
    IDLE = "IDLE"
    BUSY = "BUSY"


@dataclass(frozen=True)
class PendingRequest:
    """What was sent: a snapshot of the session at submit time"""
    mode: Mode
    session: Union[TranslateSession, GrammarSession]
    prompt: str


StateCallback = Callable[[RequestState, RequestState], None]
ChangeCallback = Callable[[], None]


class SessionController:
    def __init__(self,
                 llm_processor: LLMProcessor,
                 workspace: Optional[Workspace] = None,
                 history: Optional[HistoryStore] = None,
                 on_state_change: Optional[StateCallback] = None,
                 on_change: Optional[ChangeCallback] = None):
        self.logger = logging.getLogger(__name__)
        self.llm_processor = llm_processor
        self.workspace = workspace or Workspace()
        self.history = history or HistoryStore()
        self.on_state_change = on_state_change
        self.on_change = on_change
        self._state = RequestState.IDLE

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state == RequestState.BUSY

    def begin_request(self) -> Optional[PendingRequest]:
        """Start a request for the active session, or None if blank or busy"""
        if self.busy:
            self.logger.debug("Submit ignored: a request is already in flight")
            return None
        session = self.workspace.active
        if not session.input_text.strip():
            return None

        snapshot = dataclasses.replace(session)
        pending = PendingRequest(mode=self.workspace.mode, session=snapshot, prompt=build_prompt(snapshot))
        self._transition(RequestState.BUSY)
        self.logger.info(f"Submitting {pending.mode.value} request")
        return pending

    def finish_request(self, pending: PendingRequest, result: InferenceResult) -> HistoryEntry:
        """Apply a completed attempt to its session and record it"""
        try:
            session = self.workspace.sessions[pending.mode]
            if result.success:
                reply = result.text
            else:
                reply = result.error_message
            translation = ""
            if result.success and pending.mode == Mode.TRANSLATE:
                translation = extract_primary_translation(reply)

            session.reply = reply
            if isinstance(session, TranslateSession):
                session.translation = translation

            if isinstance(pending.session, TranslateSession):
                recorded = dataclasses.replace(pending.session, reply=reply, translation=translation)
            else:
                recorded = dataclasses.replace(pending.session, reply=reply)
            entry = self.history.create_entry(recorded)
            self.history.record(entry)
            return entry
        finally:
            self._transition(RequestState.IDLE)
            self._notify()

    def submit(self) -> Optional[HistoryEntry]:
        """Blocking submit: build, call the model, apply the result"""
        pending = self.begin_request()
        if pending is None:
            return None
        try:
            result = self.llm_processor.complete(pending.prompt)
        except Exception as e:
            self.logger.exception(f"Unexpected inference failure: {e}")
            result = InferenceResult(success=False, error=InferenceError(str(e)))
        return self.finish_request(pending, result)

    def set_mode(self, mode: Mode):
        self.workspace.set_mode(mode)
        self._notify()

    def swap_languages(self):
        self.workspace.swap_languages()
        self._notify()

    def replay(self, entry: HistoryEntry):
        self.history.replay(entry, self.workspace)
        self._notify()

    def clear_history(self):
        self.history.clear()
        self._notify()

    def _transition(self, to_state: RequestState):
        from_state = self._state
        if from_state == to_state:
            return
        self._state = to_state
        if self.on_state_change:
            self.on_state_change(from_state, to_state)

    def _notify(self):
        if self.on_change:
            self.on_change()
