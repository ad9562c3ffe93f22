"""
Speech Controller for Multilingual Tutor
Play/stop state machine for the input and result speech roles
"""

import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .languages import voice_locale
from .models import SpeechRole, VoiceDescriptor

# Rate multipliers applied to the engine's base words-per-minute
INPUT_RATE = 0.85
RESULT_RATE = 0.75

ChangeCallback = Callable[[], None]


def best_voice_for(language_code: str, voices: Iterable[VoiceDescriptor]) -> Optional[VoiceDescriptor]:
    """
    Pick the voice for a language: exact catalog locale first, then any
    voice whose locale starts with the bare code, else None (platform default).
    """
    voices = list(voices)
    wanted = (voice_locale(language_code) or "").lower()
    if wanted:
        for voice in voices:
            if voice.locale.lower() == wanted:
                return voice
    prefix = (language_code or "").lower()
    if prefix:
        for voice in voices:
            if voice.locale.lower().startswith(prefix):
                return voice
    return None


class SpeechController:
    """
    Drives speech playback for two roles sharing one engine queue.

    A single ``active_role`` holds which role is speaking, so at most one
    role can ever be Speaking. Every new request cancels whatever is
    playing; requesting the role that is already speaking only stops it.
    """

    def __init__(self, engine, input_rate: float = INPUT_RATE, result_rate: float = RESULT_RATE,
                 on_change: Optional[ChangeCallback] = None):
        self.logger = logging.getLogger(__name__)
        self.engine = engine
        self.rates: Dict[SpeechRole, float] = {
            SpeechRole.INPUT: input_rate,
            SpeechRole.RESULT: result_rate,
        }
        self.on_change = on_change

        self._active_role: Optional[SpeechRole] = None
        self._generation = 0
        self._voices: List[VoiceDescriptor] = []
        self._languages: Dict[SpeechRole, str] = {SpeechRole.INPUT: "en", SpeechRole.RESULT: "fr"}
        self._selected: Dict[SpeechRole, Optional[str]] = {SpeechRole.INPUT: None, SpeechRole.RESULT: None}
        self._manual: Dict[SpeechRole, bool] = {SpeechRole.INPUT: False, SpeechRole.RESULT: False}

    @property
    def active_role(self) -> Optional[SpeechRole]:
        return self._active_role

    def is_speaking(self, role: SpeechRole) -> bool:
        return self._active_role == role

    @property
    def available_voices(self) -> List[VoiceDescriptor]:
        return list(self._voices)

    def language(self, role: SpeechRole) -> str:
        return self._languages[role]

    # Voice selection

    def update_voices(self, voices: Iterable[VoiceDescriptor]):
        """New voice list from the host; re-derive both roles"""
        self._voices = list(voices)
        for role in SpeechRole:
            self._rederive(role)
        self._notify()

    def set_language(self, role: SpeechRole, language_code: str):
        if self._languages.get(role) == language_code:
            return
        self._languages[role] = language_code
        self._manual[role] = False
        self._rederive(role)
        self._notify()

    def sync_languages(self, languages: Mapping[SpeechRole, str]):
        for role, code in languages.items():
            self.set_language(role, code)

    def select_voice(self, role: SpeechRole, name: Optional[str]):
        """Manual override; an empty name returns to automatic selection"""
        if name and self._find_voice(name):
            self._selected[role] = name
            self._manual[role] = True
        else:
            self._manual[role] = False
            self._rederive(role)
        self._notify()

    def selected_voice(self, role: SpeechRole) -> Optional[VoiceDescriptor]:
        name = self._selected[role]
        return self._find_voice(name) if name else None

    def voices_for(self, role: SpeechRole) -> List[VoiceDescriptor]:
        prefix = self._languages[role].lower()
        return [v for v in self._voices if v.locale.lower().startswith(prefix)]

    def _find_voice(self, name: str) -> Optional[VoiceDescriptor]:
        for voice in self._voices:
            if voice.name == name:
                return voice
        return None

    def _rederive(self, role: SpeechRole):
        if self._manual[role] and self._find_voice(self._selected[role] or ""):
            return
        self._manual[role] = False
        best = best_voice_for(self._languages[role], self._voices)
        self._selected[role] = best.name if best else None

    # Playback

    def toggle(self, role: SpeechRole, text: str) -> bool:
        """
        Play ``text`` for ``role``, or stop it if that role is speaking.

        Returns True when a new utterance was queued.
        """
        if not text or not text.strip():
            return False

        was_speaking = self._active_role == role
        self._cancel()
        if was_speaking:
            self.logger.info(f"Stopped {role.value} speech")
            self._notify()
            return False

        self._generation += 1
        generation = self._generation
        utterance = self.engine.speak(
            text,
            locale=voice_locale(self._languages[role]),
            voice=self.selected_voice(role),
            rate=self.rates[role],
            on_start=lambda: self._handle_start(role, generation),
            on_end=lambda: self._handle_end(generation),
            on_error=lambda exc: self._handle_end(generation),
        )
        self._notify()
        return utterance is not None

    def stop(self):
        self._cancel()
        self._notify()

    def _cancel(self):
        self.engine.cancel()
        self._generation += 1
        self._active_role = None

    def _handle_start(self, role: SpeechRole, generation: int):
        if generation != self._generation:
            return
        self._active_role = role
        self._notify()

    def _handle_end(self, generation: int):
        if generation != self._generation:
            return
        self._active_role = None
        self._notify()

    def _notify(self):
        if self.on_change:
            self.on_change()
