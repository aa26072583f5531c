"""Configuration parsing and normalization helpers for portfoliocheck.

Brief:
  This module contains the configuration-parsing utilities used by the CLI
  entrypoint and the ASGI app. It centralizes:
    - reading YAML config files
    - merging variables from config/env/CLI
    - JSON Schema validation (including variable expansion performed by
      validate_config)
    - filling in defaults and building typed resolver settings

Inputs:
  - YAML config dicts and paths

Outputs:
  - Normalized config dicts and ResolverConfig instances
"""

from __future__ import annotations

import copy
import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from ..ingest import DEFAULT_MAX_BYTES, DEFAULT_MAX_DOMAINS
from ..resolver.dnspython_client import ResolverConfig
from .config_schema import _VAR_KEY_PATTERN, validate_config

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "server": {"host": "127.0.0.1", "port": 8080},
    "logging": {
        "level": "info",
        "stderr": True,
        "file": None,
        "syslog": False,
        "loggers": {},
    },
    "resolver": {},
    "upload": {"max_domains": DEFAULT_MAX_DOMAINS, "max_bytes": DEFAULT_MAX_BYTES},
}


def _parse_yaml_value(text: str) -> Any:
    """Parse a CLI/environment variable value as YAML, keeping the raw text on errors."""

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError:
        return text


def parse_config_variables(
    cfg: Dict[str, Any],
    *,
    cli_vars: Optional[List[str]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Brief: Merge config/environment/CLI variables into cfg['vars'].

    Inputs:
      - cfg: Parsed YAML configuration mapping (mutated in-place).
      - cli_vars: Optional list of CLI `KEY=YAML` assignments.
      - environ: Optional environment mapping (defaults to os.environ).

    Outputs:
      - dict: The merged variables mapping stored back onto cfg['vars'].

    Precedence:
      - CLI (-v/--var) overrides environment overrides config-file variables.

    Example:
      >>> cfg = {'vars': {'TIMEOUT': 2}}
      >>> parse_config_variables(cfg, cli_vars=['TIMEOUT=5'], environ={})['TIMEOUT']
      5
    """

    base = cfg.get("vars")
    if base is None:
        merged: Dict[str, Any] = {}
    elif isinstance(base, dict):
        merged = dict(base)
    else:
        raise ValueError("config.vars must be a mapping when present")

    env = os.environ if environ is None else environ
    for k, v in env.items():
        if _VAR_KEY_PATTERN.fullmatch(k):
            merged[k] = _parse_yaml_value(str(v))

    for assignment in cli_vars or []:
        if "=" not in assignment:
            raise ValueError(
                "Invalid -v/--var value (expected KEY=YAML), got: %r" % assignment
            )
        k, raw = assignment.split("=", 1)
        k = k.strip()
        if not _VAR_KEY_PATTERN.fullmatch(k):
            raise ValueError(
                "Invalid variable name %r (must be ALL_UPPERCASE and match [A-Z_][A-Z0-9_]*)"
                % k
            )
        merged[k] = _parse_yaml_value(raw)

    cfg["vars"] = merged
    return merged


def apply_defaults(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of cfg with every known section present and defaulted."""

    out = copy.deepcopy(cfg)
    for section, defaults in DEFAULTS.items():
        current = out.get(section) or {}
        out[section] = {**defaults, **current}
    return out


def load_config(
    config: Optional[Dict[str, Any]] = None,
    *,
    config_path: Optional[str] = None,
    cli_vars: Optional[List[str]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Brief: Variable-merge, validate and default a configuration mapping.

    Inputs:
      - config: Parsed configuration mapping, or None for an empty config.
      - config_path: Optional source path used in error messages.
      - cli_vars: Optional CLI `KEY=YAML` assignments.
      - environ: Optional environment mapping (defaults to os.environ).

    Outputs:
      - dict: validated configuration with all sections filled in.

    Raises:
      - ValueError: When the root is not a mapping, variables are invalid,
        schema validation fails, or a resolver nameserver is not an IP address.
    """

    cfg = copy.deepcopy(config) if config is not None else {}
    if not isinstance(cfg, dict):
        raise ValueError("Configuration root must be a mapping")

    parse_config_variables(cfg, cli_vars=cli_vars, environ=environ)
    validate_config(cfg, config_path=config_path)
    out = apply_defaults(cfg)

    # Nameserver addresses are only checked by the typed model.
    try:
        resolver_config_from(out)
    except ValidationError as exc:
        raise ValueError(
            f"Invalid resolver configuration in {config_path or '<config dict>'}: {exc}"
        ) from exc
    return out


def parse_config_file(
    config_path: str,
    *,
    cli_vars: Optional[List[str]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Brief: Read a YAML config file and run it through load_config().

    Inputs:
      - config_path: Path to the YAML configuration file.
      - cli_vars: Optional list of CLI `KEY=YAML` assignments (from -v/--var).
      - environ: Optional environment mapping (defaults to os.environ).

    Outputs:
      - dict: validated configuration with defaults applied.

    Raises:
      - OSError: When the file cannot be read.
      - ValueError: When parsing, variables, or schema validation fail.
    """

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            cfg = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

    return load_config(
        cfg if cfg is not None else {},
        config_path=config_path,
        cli_vars=cli_vars,
        environ=environ,
    )


def resolver_config_from(cfg: Dict[str, Any]) -> ResolverConfig:
    """Build typed resolver settings from the `resolver` config section."""

    return ResolverConfig(**(cfg.get("resolver") or {}))
