"""Tests for configuration loading."""

import json

import numpy as np
import pytest

from dspstream import ConfigError, StreamConfig, default_config, load_config


class TestStreamConfig:

    def test_defaults(self):
        config = default_config()
        assert config.dtype == "float64"
        assert config.numpy_dtype == np.float64
        assert config.max_elements is None
        assert config.fail_fast is True
        assert config.swap_after_stage is True
        assert config.per_dimension is False
        assert config.log_level == "WARNING"

    def test_update(self):
        config = default_config().update(max_elements=100)
        assert config.max_elements == 100
        assert default_config().max_elements is None

    def test_update_unknown_key(self):
        with pytest.raises(ConfigError):
            default_config().update(colour="blue")

    def test_invalid_dtype(self):
        with pytest.raises(ConfigError):
            StreamConfig(dtype="not-a-dtype")

    def test_invalid_max_elements(self):
        with pytest.raises(ConfigError):
            StreamConfig(max_elements=0)

    def test_to_dict_round_trip(self):
        config = StreamConfig(dtype="float32", fail_fast=False)
        assert load_config(config.to_dict()) == config


class TestLoadConfig:

    def test_none_and_instance(self):
        assert load_config(None) == StreamConfig()
        config = StreamConfig(per_dimension=True)
        assert load_config(config) is config

    def test_mapping(self):
        assert load_config({"swap_after_stage": False}).swap_after_stage is False

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "stream.yaml"
        path.write_text("dtype: float32\nmax_elements: 4096\nlog_level: DEBUG\n")
        config = load_config(path)
        assert config.dtype == "float32"
        assert config.max_elements == 4096
        assert config.log_level == "DEBUG"

    def test_json_file(self, tmp_path):
        path = tmp_path / "stream.json"
        path.write_text(json.dumps({"fail_fast": False}))
        assert load_config(str(path)).fail_fast is False

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_config(path) == StreamConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "stream.toml"
        path.write_text("dtype = 'float64'")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError):
            load_config(path)
