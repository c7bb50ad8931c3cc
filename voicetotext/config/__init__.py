"""Simple YAML configuration loader for voicetotext."""

import os
import copy
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
import logging

from ..models.history import ReplacementRule, default_replacement_rules
from ..models.session import SessionMode, SessionSettings
from ..transcription.prompt import SUPPORTED_LANGUAGES, compose_prompt

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'audio': {
        'sample_rate': 16000,
        'device_sample_rate': None,
        'chunk_size': 4096,
        'channels': 1,
        'device_index': None,
    },
    'live': {
        'chunk_interval_seconds': 2.0,
        'overlap_ms': 500,
    },
    'batch': {
        'auto_stop_on_silence': True,
        'timer_tick_seconds': 0.2,
    },
    'silence': {
        'threshold': 0.002,
        'timeout_seconds': 10.0,
    },
    'transcription': {
        'mode': 'batch',
        'model': 'base',
        'language': 'auto',
        'translate': False,
        'device': 'auto',
        'compute_type': 'default',
        'beam_size': 5,
        'prompt': {
            'context': '',
            'vocabulary': '',
            'style': 'Natural, conversational',
            'punctuation': 'Use correct punctuation: commas, periods, question marks',
            'instructions': 'Ignore background noise and silences',
        },
    },
    'replacements': None,  # None = built-in default rules
    'storage': {
        'data_directory': 'data',
    },
    'logging': {
        'level': 'INFO',
        'file_path': 'data/logs/voicetotext.log',
        'console_output': True,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge `override` into a copy of `base`."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class VoiceToTextConfig:
    """voicetotext configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used with paths relative to the working directory.
        """
        if config_path is None:
            self.config_file = None
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            self._validate(self.config)
            return

        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not loaded:
            raise ValueError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        config = _merge(DEFAULT_CONFIG, loaded)
        self._resolve_paths(config)
        self._validate(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        data_dir = config['storage']['data_directory']
        if not os.path.isabs(data_dir):
            config['storage']['data_directory'] = str(config_dir / data_dir)

        log_path = config['logging']['file_path']
        if not os.path.isabs(log_path):
            config['logging']['file_path'] = str(config_dir / log_path)

    def _validate(self, config: Dict[str, Any]) -> None:
        """Reject values the session cannot run with."""
        transcription = config['transcription']
        if transcription['language'] not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language: {transcription['language']}")
        if transcription['mode'] not in [mode.value for mode in SessionMode]:
            raise ValueError(f"Unknown transcription mode: {transcription['mode']}")
        if config['live']['chunk_interval_seconds'] <= 0:
            raise ValueError("live.chunk_interval_seconds must be positive")
        if config['live']['overlap_ms'] < 0:
            raise ValueError("live.overlap_ms must not be negative")
        if config['batch']['timer_tick_seconds'] <= 0:
            raise ValueError("batch.timer_tick_seconds must be positive")
        if config['silence']['timeout_seconds'] <= 0:
            raise ValueError("silence.timeout_seconds must be positive")

    def validate(self) -> None:
        """Re-check the configuration after values were changed with `set()`."""
        self._validate(self.config)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'transcription.language').

        Args:
            key_path: Dot-separated key path (e.g., 'live.overlap_ms')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'transcription.language')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())

    def get_composed_prompt(self) -> str:
        return compose_prompt(self.get('transcription.prompt', {}))

    def get_replacement_rules(self) -> List[ReplacementRule]:
        """Replacement rules from config, or the built-in defaults when unset."""
        rules = self.get('replacements')
        if rules is None:
            return default_replacement_rules()
        return [
            ReplacementRule(
                find=str(rule['find']),
                replace=str(rule.get('replace', '')),
                enabled=bool(rule.get('enabled', True)),
            )
            for rule in rules
        ]

    def get_session_settings(self) -> SessionSettings:
        """Snapshot of everything a session needs at start time."""
        return SessionSettings(
            mode=SessionMode(self.get('transcription.mode')),
            language=self.get('transcription.language'),
            translate=bool(self.get('transcription.translate')),
            initial_prompt=self.get_composed_prompt(),
            chunk_interval_seconds=float(self.get('live.chunk_interval_seconds')),
            overlap_ms=int(self.get('live.overlap_ms')),
            silence_threshold=float(self.get('silence.threshold')),
            silence_timeout_seconds=float(self.get('silence.timeout_seconds')),
            timer_tick_seconds=float(self.get('batch.timer_tick_seconds')),
            auto_stop_on_silence=bool(self.get('batch.auto_stop_on_silence')),
        )
