"""Unit tests for cleanshare.rules.loader: format detection, loading and
dumping of YAML/JSON rule files.
"""
from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
import yaml

from cleanshare.errors import RuleFileError, UnsupportedRuleFormat
from cleanshare.rules import HostRule, RuleSet, dumps_rules, load_rules, loads_rules, rule_format_for

_YAML_RULES = """\
remove_params: [sessionid]
remove_param_globs: ["cmp_*"]
keep_params: [ref_id]
host_rules:
  - hosts: ["l.example.net"]
    unwrap_params: [to]
"""

_EXPECTED = RuleSet(
    remove_params=("sessionid",),
    remove_param_globs=("cmp_*",),
    keep_params=("ref_id",),
    host_rules=(HostRule(hosts=("l.example.net",), unwrap_params=("to",)),),
)


# ---------------------------------------------------------------------------
# Format detection
# ---------------------------------------------------------------------------


class TestRuleFormat:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("rules.yaml", "yaml"),
            ("rules.yml", "yaml"),
            ("RULES.YML", "yaml"),
            ("rules.json", "json"),
            ("rules.Json", "json"),
        ],
    )
    def test_known_extensions(self, name: str, expected: str) -> None:
        assert rule_format_for(Path(name)) == expected

    @pytest.mark.parametrize("name", ["rules.toml", "rules.txt", "rules"])
    def test_unknown_extension_rejected(self, name: str) -> None:
        with pytest.raises(UnsupportedRuleFormat):
            rule_format_for(Path(name))

    def test_extension_checked_before_reading(self, tmp_path: Path) -> None:
        # The file does not exist: the extension error must still win
        with pytest.raises(UnsupportedRuleFormat) as info:
            load_rules(tmp_path / "missing.toml")
        assert info.value.extension == "toml"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoadRules:
    def test_load_yaml(self, write_file: Callable[[str, str], Path]) -> None:
        assert load_rules(write_file("rules.yaml", _YAML_RULES)) == _EXPECTED

    def test_load_json(self, write_file: Callable[[str, str], Path]) -> None:
        text = json.dumps(_EXPECTED.to_dict())
        assert load_rules(write_file("rules.json", text)) == _EXPECTED

    def test_load_accepts_str_path(self, write_file: Callable[[str, str], Path]) -> None:
        path = write_file("rules.yml", _YAML_RULES)
        assert load_rules(str(path)) == _EXPECTED

    def test_empty_yaml_is_empty_rule_set(self, write_file: Callable[[str, str], Path]) -> None:
        assert load_rules(write_file("rules.yaml", "")) == RuleSet.empty()

    def test_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nope.yaml"
        with pytest.raises(RuleFileError) as info:
            load_rules(path)
        assert info.value.path == path

    def test_invalid_yaml(self, write_file: Callable[[str, str], Path]) -> None:
        path = write_file("rules.yaml", "remove_params: [unclosed\n")
        with pytest.raises(RuleFileError) as info:
            load_rules(path)
        assert "invalid YAML" in info.value.reason

    def test_invalid_json(self, write_file: Callable[[str, str], Path]) -> None:
        path = write_file("rules.json", "{not json")
        with pytest.raises(RuleFileError) as info:
            load_rules(path)
        assert "invalid JSON" in info.value.reason

    def test_wrong_shape_reports_location(self, write_file: Callable[[str, str], Path]) -> None:
        path = write_file("rules.yaml", "remove_params: gclid\n")
        with pytest.raises(RuleFileError) as info:
            load_rules(path)
        assert "remove_params" in info.value.reason
        assert str(path) in str(info.value)

    def test_non_utf8_file(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_bytes(b"remove_params: [\xff\xfe]\n")
        with pytest.raises(RuleFileError):
            load_rules(path)

    def test_loads_without_path(self) -> None:
        with pytest.raises(RuleFileError) as info:
            loads_rules("[1, 2]", "json")
        assert info.value.path == Path("<json>")


# ---------------------------------------------------------------------------
# Dumping
# ---------------------------------------------------------------------------


class TestDumpRules:
    def test_dump_json_parses_back(self) -> None:
        text = dumps_rules(_EXPECTED, "json")
        assert text.endswith("\n")
        assert RuleSet.from_dict(json.loads(text)) == _EXPECTED

    def test_dump_yaml_parses_back(self) -> None:
        text = dumps_rules(_EXPECTED, "yaml")
        assert RuleSet.from_dict(yaml.safe_load(text)) == _EXPECTED

    def test_dump_yaml_keeps_key_order(self) -> None:
        text = dumps_rules(RuleSet.empty(), "yaml")
        keys = [line.split(":")[0] for line in text.splitlines()]
        assert keys == ["remove_params", "remove_param_globs", "keep_params", "host_rules"]

    def test_dump_unknown_format(self) -> None:
        with pytest.raises(ValueError):
            dumps_rules(_EXPECTED, "toml")
