"""
Text-to-Speech Engine for Multilingual Tutor
Wraps pyttsx3 with an external event loop driven by the UI timer
"""

import itertools
import logging
from typing import Callable, Dict, List, Optional, Tuple

import pyttsx3

from .models import VoiceDescriptor

StartCallback = Callable[[], None]
EndCallback = Callable[[], None]
ErrorCallback = Callable[[Exception], None]
VoicesListener = Callable[[List[VoiceDescriptor]], None]


def normalize_locale(languages) -> str:
    """
    Turn a pyttsx3 ``languages`` list into a tag like ``en-US``.

    espeak reports bytes with a leading priority byte (``b'\\x05en-gb'``),
    NSSpeechSynthesizer reports ``en_US``, SAPI often reports nothing.
    """
    for raw in languages or []:
        if isinstance(raw, (bytes, bytearray)):
            raw = bytes(raw).decode(errors="ignore")
        tag = "".join(ch for ch in str(raw) if ch.isprintable()).strip().replace("_", "-")
        if not tag:
            continue
        parts = tag.split("-")
        if len(parts) > 1 and len(parts[1]) == 2:
            parts[1] = parts[1].upper()
        return "-".join(parts)
    return ""


class TTSEngine:
    """
    Host speech engine boundary.

    All calls are made from the UI thread; ``pump()`` must be called
    regularly so pyttsx3 can deliver its callbacks.
    """

    def __init__(self, enabled: bool = True, rate: int = 200):
        self.logger = logging.getLogger(__name__)
        self.enabled = enabled
        self.rate = rate
        self.tts_engine = None
        self.default_voice_id: Optional[str] = None
        self._loop_started = False
        self._ids = itertools.count(1)
        self._callbacks: Dict[str, Tuple[Optional[StartCallback], Optional[EndCallback], Optional[ErrorCallback]]] = {}
        self._voices: List[VoiceDescriptor] = []
        self._voices_listeners: List[VoicesListener] = []

        if self.enabled:
            self._init_tts_engine()

    def _init_tts_engine(self):
        """Initialize pyttsx3 and start its non-blocking loop"""
        try:
            self.tts_engine = pyttsx3.init()
            self.default_voice_id = self.tts_engine.getProperty('voice')
            self.tts_engine.connect('started-utterance', self._on_started)
            self.tts_engine.connect('finished-utterance', self._on_finished)
            self.tts_engine.connect('error', self._on_error)
            self.tts_engine.startLoop(False)
            self._loop_started = True
            self.logger.info("pyttsx3 engine initialized")
        except Exception as e:
            self.logger.error(f"Failed to initialize TTS engine: {e}")
            self.logger.info("TTS will be disabled, translation will still work")
            self.tts_engine = None
            self.enabled = False

    # Voices

    def list_voices(self) -> List[VoiceDescriptor]:
        """Query the voices currently installed on the host"""
        if not self.tts_engine:
            return []
        try:
            voices = []
            seen = set()
            for voice in self.tts_engine.getProperty('voices') or []:
                name = getattr(voice, 'name', None) or getattr(voice, 'id', '')
                if not name or name in seen:
                    continue
                seen.add(name)
                voices.append(VoiceDescriptor(
                    name=name,
                    locale=normalize_locale(getattr(voice, 'languages', [])),
                    voice_id=getattr(voice, 'id', name),
                ))
            return voices
        except Exception as e:
            self.logger.error(f"Failed to get voices: {e}")
            return []

    def add_voices_listener(self, listener: VoicesListener):
        self._voices_listeners.append(listener)

    def poll_voices(self) -> bool:
        """Re-query voices and notify listeners if the set changed"""
        voices = self.list_voices()
        if voices == self._voices:
            return False
        self._voices = voices
        self.logger.info(f"Available voices changed: {len(voices)} voices")
        for listener in list(self._voices_listeners):
            listener(list(voices))
        return True

    # Playback

    def speak(self, text: str, locale: Optional[str] = None,
              voice: Optional[VoiceDescriptor] = None,
              rate: float = 1.0,
              on_start: Optional[StartCallback] = None,
              on_end: Optional[EndCallback] = None,
              on_error: Optional[ErrorCallback] = None) -> Optional[str]:
        """
        Queue one utterance and return its id, or None if TTS is unavailable.

        Without an explicit voice the platform default voice is used;
        pyttsx3 cannot select a language any other way.
        """
        if not self.tts_engine:
            return None

        utterance_id = f"utt-{next(self._ids)}"
        self._callbacks[utterance_id] = (on_start, on_end, on_error)
        try:
            self.tts_engine.setProperty('voice', voice.voice_id if voice else self.default_voice_id)
            self.tts_engine.setProperty('rate', max(50, int(self.rate * rate)))
            self.tts_engine.say(text, utterance_id)
            self.logger.info(
                f"Speech queued ({locale or 'default'}, {voice.name if voice else 'default voice'}): "
                f"'{text[:50]}{'...' if len(text) > 50 else ''}'"
            )
        except Exception as e:
            self.logger.error(f"Failed to queue speech: {e}")
            self._callbacks.pop(utterance_id, None)
            if on_error:
                on_error(e)
            return None
        return utterance_id

    def cancel(self):
        """Stop the current utterance and drop everything queued"""
        self._callbacks.clear()
        if not self.tts_engine:
            return
        try:
            self.tts_engine.stop()
        except Exception as e:
            self.logger.warning(f"Failed to stop TTS: {e}")

    def pump(self):
        """Advance the pyttsx3 loop by one step"""
        if not self._loop_started:
            return
        try:
            self.tts_engine.iterate()
        except Exception as e:
            self.logger.debug(f"TTS iterate failed: {e}")

    def _on_started(self, name):
        on_start, _, _ = self._callbacks.get(name, (None, None, None))
        if on_start:
            on_start()

    def _on_finished(self, name, completed=True):
        _, on_end, _ = self._callbacks.pop(name, (None, None, None))
        if on_end:
            on_end()

    def _on_error(self, name, exception=None):
        _, _, on_error = self._callbacks.pop(name, (None, None, None))
        self.logger.debug(f"Speech engine error for {name}: {exception}")
        if on_error:
            on_error(exception)

    def set_rate(self, rate: int):
        self.rate = max(50, min(500, rate))
        self.logger.info(f"Speech base rate set to: {self.rate}")

    def cleanup(self):
        """Clean up TTS resources"""
        try:
            self.cancel()
            if self._loop_started:
                self.tts_engine.endLoop()
                self._loop_started = False
            self.logger.info("TTS engine cleanup completed")
        except Exception as e:
            self.logger.error(f"Error during TTS cleanup: {e}")
