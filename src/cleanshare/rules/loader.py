"""Rule file loading and dumping.

Rule files are YAML (``.yaml`` / ``.yml``) or JSON (``.json``) documents
whose top-level shape mirrors ``RuleSet``::

    remove_params: [sessionid]
    remove_param_globs: ["cmp_*"]
    keep_params: [ref_id]
    host_rules:
      - hosts: ["l.example.net"]
        unwrap_params: [to]
        strip_all_params: false

The format is chosen from the file extension.  Every failure is fatal
and reported with the offending path.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Final

import yaml

from cleanshare.errors import RuleFileError, UnsupportedRuleFormat
from cleanshare.rules.model import RuleDataError, RuleSet

logger = logging.getLogger(__name__)

YAML_EXTENSIONS: Final[frozenset[str]] = frozenset({"yaml", "yml"})
JSON_EXTENSIONS: Final[frozenset[str]] = frozenset({"json"})


def rule_format_for(path: Path) -> str:
    """Return ``"yaml"`` or ``"json"`` for ``path``.

    Raises
    ------
    UnsupportedRuleFormat
        If the extension is not recognised.
    """
    extension = path.suffix.lstrip(".").lower()
    if extension in YAML_EXTENSIONS:
        return "yaml"
    if extension in JSON_EXTENSIONS:
        return "json"
    raise UnsupportedRuleFormat(path, extension)


def loads_rules(text: str, fmt: str, path: Path | None = None) -> RuleSet:
    """Deserialize rule text in ``fmt`` (``"yaml"`` or ``"json"``).

    Parameters
    ----------
    text:
        The document body.
    fmt:
        ``"yaml"`` or ``"json"``.
    path:
        Where the text came from, used in error messages only.

    Raises
    ------
    RuleFileError
        If the text cannot be parsed or does not have the rule-file shape.
    """
    origin = path if path is not None else Path(f"<{fmt}>")
    try:
        if fmt == "yaml":
            data: Any = yaml.safe_load(text)
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise ValueError(f"unknown rule format {fmt!r}")
    except yaml.YAMLError as exc:
        raise RuleFileError(origin, f"invalid YAML: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RuleFileError(origin, f"invalid JSON: {exc}") from exc

    try:
        return RuleSet.from_dict(data)
    except RuleDataError as exc:
        raise RuleFileError(origin, str(exc)) from exc


def load_rules(path: str | Path) -> RuleSet:
    """Load a rule file from disk.

    Parameters
    ----------
    path:
        Path to a ``.yaml``, ``.yml`` or ``.json`` rule file.

    Returns
    -------
    RuleSet
        The file's rules, not yet merged with the built-ins.

    Raises
    ------
    UnsupportedRuleFormat
        If the extension is not recognised (checked before reading).
    RuleFileError
        If the file cannot be read or deserialized.
    """
    path = Path(path)
    fmt = rule_format_for(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuleFileError(path, exc.strerror or str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise RuleFileError(path, f"not valid UTF-8: {exc}") from exc
    rules = loads_rules(text, fmt, path)
    logger.debug(
        "Loaded %d host rule(s) and %d global param rule(s) from %s",
        len(rules.host_rules),
        len(rules.remove_params) + len(rules.remove_param_globs) + len(rules.keep_params),
        path,
    )
    return rules


def dumps_rules(rules: RuleSet, fmt: str = "yaml") -> str:
    """Serialize ``rules`` to YAML or JSON text in rule-file shape."""
    data = rules.to_dict()
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    raise ValueError(f"unknown rule format {fmt!r}")
