"""Tests for the mulawkit config system."""

import pytest
import yaml
from pydantic import ValidationError

from mulawkit.config import ConverterConfig, DEFAULT_CONFIG_YAML, OutputConfig, load_config


class TestConverterConfig:

    def test_default_config(self):
        config = ConverterConfig()
        assert config.conversion.strict_fmt_chunk is False
        assert config.conversion.batch_size == 4096
        assert config.conversion.smoothing_window == 5
        assert config.output.container == "raw"
        assert config.output.suffix == ".ulaw"
        assert config.server.port == 8080
        assert config.logging.level == "INFO"

    def test_from_dict_full(self):
        config = ConverterConfig.from_dict({
            "conversion": {"strict_fmt_chunk": True, "batch_size": 128},
            "output": {"container": "wav"},
        })
        assert config.conversion.strict_fmt_chunk is True
        assert config.conversion.batch_size == 128
        assert config.output.suffix == ".ulaw.wav"

    def test_from_dict_shorthand(self):
        config = ConverterConfig.from_dict({
            "strict": True,
            "container": "wav",
            "port": 9000,
            "log_level": "DEBUG",
        })
        assert config.conversion.strict_fmt_chunk is True
        assert config.output.container == "wav"
        assert config.server.port == 9000
        assert config.logging.level == "DEBUG"

    def test_from_dict_does_not_mutate_input(self):
        raw = {"strict": True}
        ConverterConfig.from_dict(raw)
        assert raw == {"strict": True}

    def test_rejects_bad_values(self):
        with pytest.raises(ValidationError):
            ConverterConfig.from_dict({"batch_size": 0})
        with pytest.raises(ValidationError):
            OutputConfig(container="flac")

    def test_load_config_defaults(self):
        assert load_config(None) == ConverterConfig()

    def test_load_config_from_dict(self):
        config = load_config({"container": "wav"})
        assert config.output.container == "wav"

    def test_load_config_from_converterconfig(self):
        original = ConverterConfig()
        config = load_config(original)
        assert config is original

    def test_load_config_from_yaml(self, tmp_path):
        path = tmp_path / "mulawkit.yaml"
        path.write_text("conversion:\n  strict_fmt_chunk: true\nport: 9999\n")
        config = load_config(str(path))
        assert config.conversion.strict_fmt_chunk is True
        assert config.server.port == 9999

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == ConverterConfig()

    def test_load_config_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_load_config_bad_type(self):
        with pytest.raises(TypeError):
            load_config(42)

    def test_default_yaml_is_valid(self):
        """The default YAML template should parse into the default config."""
        data = yaml.safe_load(DEFAULT_CONFIG_YAML)
        config = ConverterConfig.from_dict(data)
        assert config == ConverterConfig()
