"""
Multilingual Tutor Package
Translation and grammar help from an LLM, with text-to-speech playback
"""

__version__ = "1.0.0"

from .languages import LANGUAGES, LanguageEntry, get_language
from .llm_processor import InferenceResult, LLMProcessor
from .models import Mode, SpeechRole, Tone
from .prompt_builder import build_grammar_prompt, build_prompt, build_translate_prompt
from .response_parser import extract_primary_translation
from .session_controller import SessionController
from .session_manager import HistoryStore, Workspace
from .speech_controller import SpeechController
from .tts_engine import TTSEngine

__all__ = [
    'LANGUAGES',
    'LanguageEntry',
    'get_language',
    'InferenceResult',
    'LLMProcessor',
    'Mode',
    'SpeechRole',
    'Tone',
    'build_grammar_prompt',
    'build_prompt',
    'build_translate_prompt',
    'extract_primary_translation',
    'SessionController',
    'HistoryStore',
    'Workspace',
    'SpeechController',
    'TTSEngine',
]
