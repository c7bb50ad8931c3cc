"""Unit tests for VoiceToTextConfig."""

from pathlib import Path

import pytest
import yaml

from voicetotext.config import VoiceToTextConfig
from voicetotext.models.session import SessionMode


def write_config(directory, data):
    path = Path(directory) / "voicetotext.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return str(path)


@pytest.mark.unit
class TestVoiceToTextConfig:

    def test_defaults_without_file(self):
        config = VoiceToTextConfig()

        assert config.config_file is None
        assert config.get('transcription.model') == 'base'
        assert config.get('silence.threshold') == 0.002
        assert config.get('live.overlap_ms') == 500

    def test_file_values_merge_over_defaults(self, temp_data_dir):
        path = write_config(temp_data_dir, {
            'transcription': {'mode': 'live', 'language': 'es'},
            'silence': {'timeout_seconds': 5},
        })

        config = VoiceToTextConfig(path)

        assert config.get('transcription.mode') == 'live'
        assert config.get('transcription.language') == 'es'
        assert config.get('transcription.model') == 'base'
        assert config.get('silence.timeout_seconds') == 5
        assert config.get('silence.threshold') == 0.002

    def test_relative_paths_resolve_against_config_dir(self, temp_data_dir):
        path = write_config(temp_data_dir, {'storage': {'data_directory': 'store'}})

        config = VoiceToTextConfig(path)

        assert config.get('storage.data_directory') == str(Path(temp_data_dir) / 'store')
        assert config.get('logging.file_path') == str(Path(temp_data_dir) / 'data/logs/voicetotext.log')

    def test_missing_file_raises(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            VoiceToTextConfig(f"{temp_data_dir}/nope.yaml")

    def test_empty_file_raises(self, temp_data_dir):
        path = Path(temp_data_dir) / "empty.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ValueError, match="empty"):
            VoiceToTextConfig(str(path))

    def test_invalid_yaml_raises(self, temp_data_dir):
        path = Path(temp_data_dir) / "bad.yaml"
        path.write_text("audio: [unclosed", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid YAML"):
            VoiceToTextConfig(str(path))

    @pytest.mark.parametrize("override,message", [
        ({'transcription': {'language': 'xx'}}, "Unsupported language"),
        ({'transcription': {'mode': 'stream'}}, "Unknown transcription mode"),
        ({'live': {'chunk_interval_seconds': 0}}, "chunk_interval_seconds"),
        ({'live': {'overlap_ms': -1}}, "overlap_ms"),
        ({'silence': {'timeout_seconds': 0}}, "timeout_seconds"),
    ])
    def test_invalid_values_rejected(self, temp_data_dir, override, message):
        path = write_config(temp_data_dir, override)
        with pytest.raises(ValueError, match=message):
            VoiceToTextConfig(path)

    def test_set_then_validate(self):
        config = VoiceToTextConfig()
        config.set('transcription.language', 'klingon')
        with pytest.raises(ValueError):
            config.validate()

    def test_session_settings_snapshot(self):
        config = VoiceToTextConfig()
        config.set('transcription.mode', 'live')
        config.set('transcription.translate', True)

        settings = config.get_session_settings()

        assert settings.mode == SessionMode.LIVE
        assert settings.translate is True
        assert settings.overlap_samples == 8000
        assert settings.initial_prompt.startswith("# Style\n")

        config.set('transcription.translate', False)
        assert settings.translate is True

    def test_replacement_rules_default_and_custom(self, temp_data_dir):
        assert [rule.find for rule in VoiceToTextConfig().get_replacement_rules()] == \
            ["arroba", "hashtag", "guion bajo"]

        path = write_config(temp_data_dir, {'replacements': [
            {'find': 'comma', 'replace': ','},
            {'find': 'period', 'replace': '.', 'enabled': False},
        ]})
        rules = VoiceToTextConfig(path).get_replacement_rules()

        assert [(r.find, r.replace, r.enabled) for r in rules] == [
            ('comma', ',', True), ('period', '.', False),
        ]

    def test_empty_replacement_list_disables_defaults(self, temp_data_dir):
        path = write_config(temp_data_dir, {'replacements': []})
        assert VoiceToTextConfig(path).get_replacement_rules() == []
