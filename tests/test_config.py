"""Unit tests for run configuration and config file loading."""

import json

import pytest

from benchmarker.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_RUNS,
    DEFAULT_WARMUP_RUNS,
    RunConfig,
    load_run_config,
    split_cli_args,
)
from benchmarker.config_io import load_config_file
from benchmarker.errors import ConfigError


class TestRunConfig:
    """RunConfig construction and validation."""

    def test_defaults(self):
        config = RunConfig("/bin/true")
        assert config.args == ()
        assert config.runs == DEFAULT_RUNS
        assert config.warmup == DEFAULT_WARMUP_RUNS
        assert config.chunk_size == DEFAULT_CHUNK_SIZE
        assert config.print_initial is False
        assert config.stop_signal is None

    def test_args_list_becomes_tuple(self):
        config = RunConfig("/bin/echo", args=["a", "b c"])
        assert config.args == ("a", "b c")

    def test_args_string_is_split_on_spaces(self):
        config = RunConfig("/bin/echo", args="-n  hello world")
        assert config.args == ("-n", "hello", "world")

    def test_empty_args_string_gives_no_args(self):
        assert split_cli_args("") == ()
        assert split_cli_args(None) == ()

    def test_zero_counts_allowed(self):
        config = RunConfig("/bin/true", runs=0, warmup=0)
        assert config.runs == 0
        assert config.warmup == 0

    @pytest.mark.parametrize("field_name", ["runs", "warmup"])
    def test_negative_counts_rejected(self, field_name):
        with pytest.raises(ConfigError):
            RunConfig("/bin/true", **{field_name: -1})

    def test_zero_chunk_size_rejected(self):
        with pytest.raises(ConfigError):
            RunConfig("/bin/true", chunk_size=0)

    def test_bool_runs_rejected(self):
        with pytest.raises(ConfigError):
            RunConfig("/bin/true", runs=True)

    def test_binary_not_checked_for_existence(self):
        config = RunConfig("/definitely/not/here")
        assert config.binary == "/definitely/not/here"

    def test_frozen(self):
        config = RunConfig("/bin/true")
        with pytest.raises(AttributeError):
            config.runs = 5

    def test_claim_only_once(self):
        config = RunConfig("/bin/true")
        assert config.claim() is config
        assert config.claimed
        with pytest.raises(ConfigError, match="already consumed"):
            config.claim()

    def test_to_dict_excludes_stop_signal(self):
        config = RunConfig("/bin/echo", args=["x"], runs=3, stop_signal=object())
        assert config.to_dict() == {
            "binary": "/bin/echo",
            "args": ["x"],
            "runs": 3,
            "warmup": DEFAULT_WARMUP_RUNS,
            "print_initial": False,
            "chunk_size": DEFAULT_CHUNK_SIZE,
        }


class TestFromDict:
    """Building RunConfig from mappings."""

    def test_from_dict(self):
        config = RunConfig.from_dict({"binary": "/bin/true", "runs": 10, "warmup": 0})
        assert config.runs == 10
        assert config.warmup == 0

    def test_from_dict_attaches_stop_signal(self):
        marker = object()
        config = RunConfig.from_dict({"binary": "/bin/true"}, stop_signal=marker)
        assert config.stop_signal is marker

    def test_missing_binary(self):
        with pytest.raises(ConfigError, match="binary"):
            RunConfig.from_dict({"runs": 10})

    def test_unknown_keys(self):
        with pytest.raises(ConfigError, match="retries"):
            RunConfig.from_dict({"binary": "/bin/true", "retries": 3})

    def test_private_fields_not_accepted(self):
        with pytest.raises(ConfigError):
            RunConfig.from_dict({"binary": "/bin/true", "_claimed": True})


class TestLoadRunConfig:
    """Config file parsing (YAML/JSON)."""

    def test_load_yaml_with_section(self, tmp_path):
        path = tmp_path / "bench.yaml"
        path.write_text(
            "benchmark:\n  binary: /bin/echo\n  args: hello world\n  runs: 50\n  chunk_size: 5\n"
        )
        config = load_run_config(str(path))
        assert config.binary == "/bin/echo"
        assert config.args == ("hello", "world")
        assert config.runs == 50
        assert config.chunk_size == 5

    def test_load_json_top_level(self, tmp_path):
        path = tmp_path / "bench.json"
        path.write_text(json.dumps({"binary": "/bin/true", "runs": 7, "print_initial": True}))
        config = load_run_config(str(path))
        assert config.runs == 7
        assert config.print_initial is True

    def test_overrides_win(self, tmp_path):
        path = tmp_path / "bench.yml"
        path.write_text("binary: /bin/true\nruns: 50\n")
        config = load_run_config(str(path), overrides={"runs": 2})
        assert config.runs == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_run_config(str(tmp_path / "missing.yaml"))

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "bench.toml"
        path.write_text("binary = '/bin/true'\n")
        with pytest.raises(ConfigError, match="Unsupported"):
            load_config_file(str(path))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bench.yaml"
        path.write_text("binary: [unclosed\n")
        with pytest.raises(ConfigError, match="Could not read"):
            load_config_file(str(path))

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "bench.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config_file(str(path))

    def test_empty_yaml_is_empty_mapping(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config_file(str(path)) == {}
