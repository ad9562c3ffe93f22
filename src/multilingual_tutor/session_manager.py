"""
Session Manager for Multilingual Tutor
Active per-mode workspace and the in-memory request history
"""

import logging
import time
from datetime import datetime
from typing import Dict, Iterator, List, Union

from .models import (
    GrammarHistoryEntry,
    GrammarSession,
    HistoryEntry,
    Mode,
    SpeechRole,
    TranslateHistoryEntry,
    TranslateSession,
)

Session = Union[TranslateSession, GrammarSession]


class Workspace:
    """One session per mode; only the one for the current mode is active"""

    def __init__(self, mode: Mode = Mode.TRANSLATE):
        self.mode = Mode(mode)
        self.sessions: Dict[Mode, Session] = {
            Mode.TRANSLATE: TranslateSession(),
            Mode.GRAMMAR: GrammarSession(),
        }

    @property
    def active(self) -> Session:
        return self.sessions[self.mode]

    @property
    def translate(self) -> TranslateSession:
        return self.sessions[Mode.TRANSLATE]

    @property
    def grammar(self) -> GrammarSession:
        return self.sessions[Mode.GRAMMAR]

    def set_mode(self, mode: Mode):
        self.mode = Mode(mode)

    def swap_languages(self):
        session = self.translate
        session.source_lang, session.target_lang = session.target_lang, session.source_lang

    def speech_languages(self) -> Dict[SpeechRole, str]:
        """Language each speech role should speak in the current mode"""
        input_lang = self.translate.source_lang if self.mode == Mode.TRANSLATE else self.grammar.language
        return {
            SpeechRole.INPUT: input_lang,
            SpeechRole.RESULT: self.translate.target_lang,
        }


def now_ms() -> int:
    return int(time.time() * 1000)


class HistoryStore:
    """Most-recent-first log of completed requests. Not persisted."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._entries: List[HistoryEntry] = []
        self._last_id = 0

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))

    def next_id(self) -> int:
        """Clock-based id, bumped when two entries land in the same millisecond"""
        self._last_id = max(now_ms(), self._last_id + 1)
        return self._last_id

    def create_entry(self, session: Session) -> HistoryEntry:
        """Snapshot a session into an immutable history entry"""
        common = dict(
            entry_id=self.next_id(),
            input_text=session.input_text,
            reply=session.reply,
            timestamp=datetime.now().strftime("%H:%M:%S"),
        )
        if isinstance(session, TranslateSession):
            return TranslateHistoryEntry(
                source_lang=session.source_lang,
                target_lang=session.target_lang,
                tone=session.tone,
                translation=session.translation,
                **common,
            )
        return GrammarHistoryEntry(language=session.language, **common)

    def record(self, entry: HistoryEntry):
        self._entries.insert(0, entry)
        self.logger.info(f"Recorded {entry.mode.value} history entry {entry.entry_id}")

    def clear(self):
        count = len(self._entries)
        self._entries = []
        self.logger.info(f"Cleared {count} history entries")

    def replay(self, entry: HistoryEntry, workspace: Workspace):
        """Copy an entry back into its mode's session and make that mode active"""
        if isinstance(entry, TranslateHistoryEntry):
            session = workspace.translate
            session.input_text = entry.input_text
            session.source_lang = entry.source_lang
            session.target_lang = entry.target_lang
            session.tone = entry.tone
            session.reply = entry.reply
            session.translation = entry.translation
        elif isinstance(entry, GrammarHistoryEntry):
            session = workspace.grammar
            session.input_text = entry.input_text
            session.language = entry.language
            session.reply = entry.reply
        else:
            raise TypeError(f"Unsupported history entry: {type(entry).__name__}")
        workspace.set_mode(entry.mode)
        self.logger.info(f"Replayed history entry {entry.entry_id}")
