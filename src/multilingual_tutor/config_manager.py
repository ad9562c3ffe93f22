"""
Configuration Manager for Multilingual Tutor
Defaults, optional JSON settings file and .env / environment overrides
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from dotenv import load_dotenv, set_key

from .languages import get_language
from .llm_processor import BACKEND_HTTP, BACKEND_SDK, DEFAULT_API_URL, DEFAULT_MAX_TOKENS, DEFAULT_MODEL
from .models import Tone
from .speech_controller import INPUT_RATE, RESULT_RATE


@dataclass
class AppConfig:
    """Configuration data class with defaults"""
    # LLM settings
    anthropic_api_key: Optional[str] = None
    llm_api_url: str = DEFAULT_API_URL
    llm_model: str = DEFAULT_MODEL
    llm_max_tokens: int = DEFAULT_MAX_TOKENS
    llm_backend: str = BACKEND_HTTP

    # TTS settings
    enable_tts: bool = True
    tts_rate: int = 200
    tts_input_rate: float = INPUT_RATE
    tts_result_rate: float = RESULT_RATE
    voice_poll_ms: int = 2000

    # Starting selections
    source_lang: str = "en"
    target_lang: str = "fr"
    grammar_lang: str = "en"
    tone: str = Tone.FORMAL.value

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = "multilingual_tutor.log"


SENSITIVE_KEYS = ("anthropic_api_key",)


def _parse_bool(value: str) -> bool:
    return value.lower() in ['true', '1', 'yes']


ENV_OVERRIDES: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    'ANTHROPIC_API_KEY': ('anthropic_api_key', str),
    'LLM_API_URL': ('llm_api_url', str),
    'LLM_MODEL': ('llm_model', str),
    'LLM_MAX_TOKENS': ('llm_max_tokens', int),
    'LLM_BACKEND': ('llm_backend', lambda v: v.lower()),
    'ENABLE_TTS': ('enable_tts', _parse_bool),
    'TTS_RATE': ('tts_rate', int),
    'TTS_INPUT_RATE': ('tts_input_rate', float),
    'TTS_RESULT_RATE': ('tts_result_rate', float),
    'VOICE_POLL_MS': ('voice_poll_ms', int),
    'SOURCE_LANG': ('source_lang', str),
    'TARGET_LANG': ('target_lang', str),
    'GRAMMAR_LANG': ('grammar_lang', str),
    'TONE': ('tone', lambda v: v.lower()),
    'LOG_LEVEL': ('log_level', lambda v: v.upper()),
    'LOG_FILE': ('log_file', str),
}


class ConfigManager:
    """
    Loads configuration in three layers: dataclass defaults, the JSON
    settings file, then environment variables (including ``.env``).
    """

    def __init__(self, config_file: str = "multilingual_tutor_config.json",
                 env_file: str = ".env"):
        self.config_file = Path(config_file)
        self.env_file = Path(env_file)

        self.logger = logging.getLogger(__name__)

        self._load_env()
        self.config = self._load_config()

    def _load_env(self):
        """Load environment variables from .env file"""
        if self.env_file.exists():
            load_dotenv(self.env_file)
            self.logger.info(f"Environment loaded from: {self.env_file}")
        else:
            self.logger.info("No .env file found, using system environment")

    def _load_config(self) -> AppConfig:
        config_dict = asdict(AppConfig())

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    saved_config = json.load(f)
                known = {f.name for f in fields(AppConfig)}
                config_dict.update({k: v for k, v in saved_config.items() if k in known})
            except (OSError, ValueError, AttributeError) as e:
                self.logger.warning(f"Ignoring unreadable config file {self.config_file}: {e}")

        config_dict.update(self._get_env_overrides())
        self.logger.info("Configuration loaded successfully")
        return AppConfig(**config_dict)

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Get configuration overrides from environment variables"""
        env_overrides = {}
        for env_name, (field_name, parse) in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if not raw:
                continue
            try:
                env_overrides[field_name] = parse(raw)
            except ValueError:
                self.logger.warning(f"Invalid {env_name}: {raw}")
        return env_overrides

    def get_config(self) -> AppConfig:
        return self.config

    def update_config(self, **kwargs):
        """Update configuration parameters in memory"""
        config_dict = asdict(self.config)
        config_dict.update(kwargs)
        self.config = AppConfig(**config_dict)
        self.logger.info("Configuration updated")

    def save_config(self, config: Optional[AppConfig] = None):
        """Save non-sensitive configuration to the JSON settings file"""
        config_dict = asdict(config or self.config)
        for key in SENSITIVE_KEYS:
            config_dict.pop(key, None)
        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
            self.logger.info(f"Configuration saved to: {self.config_file}")
        except OSError as e:
            self.logger.error(f"Failed to save configuration: {e}")

    def set_env_var(self, key: str, value: str):
        """Set environment variable and update .env file"""
        os.environ[key] = value
        try:
            self.env_file.touch(exist_ok=True)
            set_key(str(self.env_file), key, value)
            self.logger.info(f"Environment variable set: {key}")
        except OSError as e:
            self.logger.error(f"Failed to set environment variable {key}: {e}")

    def validate_config(self) -> Dict[str, Any]:
        """Validate current configuration and return status"""
        results = {'valid': True, 'errors': [], 'warnings': []}
        config = self.config

        if not config.anthropic_api_key:
            results['warnings'].append(
                "No ANTHROPIC_API_KEY configured; requests will be rejected by the API"
            )
        if config.llm_backend not in (BACKEND_HTTP, BACKEND_SDK):
            results['errors'].append(
                f"Invalid LLM backend: {config.llm_backend}. Valid options: {BACKEND_HTTP}, {BACKEND_SDK}"
            )
        if config.llm_max_tokens <= 0:
            results['errors'].append("LLM max tokens must be positive")
        if not 50 <= config.tts_rate <= 500:
            results['warnings'].append(
                f"TTS rate {config.tts_rate} may be too fast/slow. Recommended: 150-250"
            )
        for name in ('tts_input_rate', 'tts_result_rate'):
            if getattr(config, name) <= 0:
                results['errors'].append(f"{name} must be positive")
        for name in ('source_lang', 'target_lang', 'grammar_lang'):
            code = getattr(config, name)
            if get_language(code) is None:
                results['errors'].append(f"Unsupported language for {name}: {code}")
        if config.tone not in [t.value for t in Tone]:
            results['errors'].append(f"Invalid tone: {config.tone}")

        results['valid'] = not results['errors']
        return results

    def get_config_summary(self) -> Dict[str, Any]:
        """Summary for diagnostics; the API key is masked"""
        return {
            'llm': {
                'backend': self.config.llm_backend,
                'url': self.config.llm_api_url,
                'model': self.config.llm_model,
                'max_tokens': self.config.llm_max_tokens,
                'api_key': 'set' if self.config.anthropic_api_key else 'not set',
            },
            'tts': {
                'enabled': self.config.enable_tts,
                'rate': self.config.tts_rate,
                'input_rate': self.config.tts_input_rate,
                'result_rate': self.config.tts_result_rate,
            },
            'files': {
                'config_file': str(self.config_file),
                'env_file': str(self.env_file),
            },
        }
