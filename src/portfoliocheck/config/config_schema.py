"""JSON Schema-based validation for portfoliocheck YAML configuration.

This module expands configuration variables and validates the result against
the JSON Schema document shipped next to it as ``config-schema.json``.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator, ValidationError

logger = logging.getLogger("portfoliocheck.config")

_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")
_VAR_KEY_PATTERN = re.compile(r"[A-Z_][A-Z0-9_]*")


def expand_variables(cfg: Dict[str, Any]) -> None:
    """Brief: Expand top-level `vars` into the config and remove the group.

    Inputs:
      - cfg: Parsed YAML configuration mapping (mutated in-place).

    Outputs:
      - None.

    Behavior:
      - Reads cfg['vars'] (a mapping of key -> YAML value).
      - Replaces `${KEY}` occurrences inside strings.
      - If a string value is exactly `$KEY` or `${KEY}`, the value is replaced
        with the variable's underlying YAML value (list/dict/int/etc.).
      - Unknown references are left untouched.
      - The `vars` group itself is removed after expansion so JSON Schema
        validation does not reject it.

    Raises:
      - ValueError: for non-mapping vars, badly named keys, or cycles.
    """

    variables = cfg.get("vars")
    if variables is None:
        cfg.pop("vars", None)
        return
    if not isinstance(variables, dict):
        raise ValueError("config.vars must be a mapping when present")

    for k in variables.keys():
        if not isinstance(k, str):
            raise ValueError("config.vars keys must be strings")
        if not _VAR_KEY_PATTERN.fullmatch(k):
            raise ValueError(f"config.vars key {k!r} must match [A-Z_][A-Z0-9_]*")

    resolved: Dict[str, Any] = {}

    def _resolve_var(key: str, stack: List[str]) -> Any:
        if key in resolved:
            return resolved[key]
        if key in stack:
            cycle = " -> ".join(stack + [key])
            raise ValueError(f"config.vars contains a cycle: {cycle}")
        if key not in variables:
            raise KeyError(key)

        stack.append(key)
        value = _expand_obj(variables[key], stack)
        stack.pop()

        resolved[key] = value
        return value

    def _expand_string(text: str, stack: List[str]) -> Any:
        # Whole-node injection: "$KEY" or "${KEY}" becomes the variable value.
        if text.startswith("${") and text.endswith("}") and text[2:-1] in variables:
            return copy.deepcopy(_resolve_var(text[2:-1], stack))
        if text.startswith("$") and text[1:] in variables:
            return copy.deepcopy(_resolve_var(text[1:], stack))

        def _repl(match: re.Match[str]) -> str:
            try:
                v = _resolve_var(match.group(1), stack)
            except KeyError:
                return match.group(0)
            if isinstance(v, bool):
                return "true" if v else "false"
            if v is None:
                return "null"
            if isinstance(v, (int, float, str)):
                return str(v)
            return json.dumps(v)

        return _VAR_PATTERN.sub(_repl, text)

    def _expand_obj(obj: Any, stack: List[str]) -> Any:
        if isinstance(obj, str):
            return _expand_string(obj, stack)
        if isinstance(obj, list):
            return [_expand_obj(item, stack) for item in obj]
        if isinstance(obj, dict):
            return {k: _expand_obj(v, stack) for k, v in obj.items()}
        return obj

    # Resolve all variables first so cycles surface even when unused.
    for k in list(variables.keys()):
        _resolve_var(k, [])

    for top_key in list(cfg.keys()):
        if top_key == "vars":
            continue
        cfg[top_key] = _expand_obj(cfg[top_key], [])

    cfg.pop("vars", None)


def get_default_schema_path() -> Path:
    """Return the path of the JSON Schema bundled with the package."""

    return Path(__file__).resolve().parent / "config-schema.json"


def _load_schema(schema_path: Optional[Path] = None) -> Dict[str, Any]:
    path = schema_path or get_default_schema_path()
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _format_errors(errors: List[ValidationError], *, config_path: Optional[str]) -> str:
    """Brief: Format jsonschema validation errors into a human-readable string.

    Inputs:
      - errors: List of jsonschema.ValidationError instances.
      - config_path: Optional path to the YAML config being validated.

    Outputs:
      - String suitable for display in logs or CLI output.
    """

    lines: List[str] = [f"Invalid configuration in {config_path or '<config dict>'}:"]
    for err in errors:
        instance_path = "/".join(str(p) for p in err.path) or "<root>"
        schema_path = "/".join(str(p) for p in err.schema_path)
        lines.append(f"- {instance_path}: {err.message} (schema: {schema_path})")
    return "\n".join(lines)


def validate_config(
    cfg: Dict[str, Any],
    *,
    schema_path: Optional[Path] = None,
    config_path: Optional[str] = None,
) -> None:
    """Brief: Expand variables in cfg and validate it against the JSON Schema.

    Inputs:
      - cfg: Parsed configuration mapping (mutated: variables are expanded and
        the `vars` group removed).
      - schema_path: Optional explicit path to a JSON Schema file.
      - config_path: Optional path of the YAML file, used in error messages.

    Outputs:
      - None on success.

    Raises:
      - ValueError: listing every validation error with its instance path.

    Example:
      >>> validate_config({"server": {"port": 8080}})
    """

    expand_variables(cfg)

    schema = _load_schema(schema_path)
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(cfg), key=lambda e: list(map(str, e.path)))
    if errors:
        raise ValueError(_format_errors(errors, config_path=config_path))
    logger.debug("Configuration %s passed schema validation", config_path or "<dict>")
