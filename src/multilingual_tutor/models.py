"""
Core data models for Multilingual Tutor
Modes, per-mode session state, history entries and speech voices
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from .languages import language_name


class Mode(str, Enum):
    TRANSLATE = "translate"
    GRAMMAR = "grammar"


class Tone(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"


class SpeechRole(str, Enum):
    """Playback target: the text the user typed, or the extracted translation"""
    INPUT = "input"
    RESULT = "result"


@dataclass
class TranslateSession:
    input_text: str = ""
    translation: str = ""
    reply: str = ""
    source_lang: str = "en"
    target_lang: str = "fr"
    tone: Tone = Tone.FORMAL

    @property
    def mode(self) -> Mode:
        return Mode.TRANSLATE


@dataclass
class GrammarSession:
    input_text: str = ""
    reply: str = ""
    language: str = "en"

    @property
    def mode(self) -> Mode:
        return Mode.GRAMMAR


@dataclass(frozen=True)
class HistoryEntry(ABC):
    """One completed request. Never mutated after creation."""
    entry_id: int
    input_text: str
    reply: str
    timestamp: str

    @property
    @abstractmethod
    def mode(self) -> Mode:
        ...

    def _languages_label(self) -> str:
        return ""

    def summary(self, max_input: int = 40) -> str:
        """Short one-line label used by the history list"""
        text = " ".join(self.input_text.split())
        if len(text) > max_input:
            text = text[:max_input] + "..."
        return f"[{self.timestamp}] {self.mode.value} {self._languages_label()} | {text}"


@dataclass(frozen=True)
class TranslateHistoryEntry(HistoryEntry):
    source_lang: str
    target_lang: str
    tone: Tone
    translation: str = ""

    @property
    def mode(self) -> Mode:
        return Mode.TRANSLATE

    def _languages_label(self) -> str:
        return f"{self.source_lang} → {self.target_lang} ({self.tone.value})"


@dataclass(frozen=True)
class GrammarHistoryEntry(HistoryEntry):
    language: str

    @property
    def mode(self) -> Mode:
        return Mode.GRAMMAR

    def _languages_label(self) -> str:
        return f"{language_name(self.language, self.language)} grammar"


@dataclass(frozen=True)
class VoiceDescriptor:
    """A synthesis voice as reported by the host engine"""
    name: str
    locale: str
    voice_id: str = ""
