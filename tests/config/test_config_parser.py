"""
Brief: Tests for portfoliocheck.config.config_parser.

Inputs:
  - None

Outputs:
  - None
"""

from __future__ import annotations

import pytest

from portfoliocheck.config.config_parser import (
    apply_defaults,
    load_config,
    parse_config_file,
    parse_config_variables,
    resolver_config_from,
)


def test_load_config_empty_fills_defaults() -> None:
    cfg = load_config(environ={})
    assert cfg["server"] == {"host": "127.0.0.1", "port": 8080}
    assert cfg["upload"] == {"max_domains": 10000, "max_bytes": 1048576}
    assert cfg["logging"]["level"] == "info"
    assert cfg["resolver"] == {}
    assert "vars" not in cfg


def test_apply_defaults_keeps_explicit_values() -> None:
    cfg = apply_defaults({"upload": {"max_domains": 5}})
    assert cfg["upload"] == {"max_domains": 5, "max_bytes": 1048576}


def test_parse_config_variables_precedence() -> None:
    """
    Brief: CLI overrides environment overrides config-file variables.

    Inputs:
      - vars in cfg, env and CLI

    Outputs:
      - None; asserts merged values (YAML-parsed)
    """
    cfg = {"vars": {"A": 1, "B": 1, "C": 1}}
    merged = parse_config_variables(
        cfg, cli_vars=["C=3"], environ={"B": "2", "C": "2", "lower": "x"}
    )
    assert merged == {"A": 1, "B": 2, "C": 3}
    assert cfg["vars"] is merged


@pytest.mark.parametrize("bad", ["NOEQUALS", "lower=1"])
def test_parse_config_variables_rejects_bad_cli(bad) -> None:
    with pytest.raises(ValueError):
        parse_config_variables({}, cli_vars=[bad], environ={})


def test_parse_config_variables_rejects_non_mapping() -> None:
    with pytest.raises(ValueError):
        parse_config_variables({"vars": ["A"]}, environ={})


def test_parse_config_file_expands_variables(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "vars:\n"
        "  UPSTREAM: 192.0.2.53\n"
        "  SERVERS: ['192.0.2.1', '192.0.2.2']\n"
        "resolver:\n"
        "  nameservers: $SERVERS\n"
        "server:\n"
        "  host: '${UPSTREAM}'\n"
        "  port: 9000\n"
    )
    cfg = parse_config_file(str(path), environ={})
    assert cfg["resolver"]["nameservers"] == ["192.0.2.1", "192.0.2.2"]
    assert cfg["server"] == {"host": "192.0.2.53", "port": 9000}


def test_parse_config_file_cli_var_overrides(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("vars: {PORT: 9000}\nserver: {port: $PORT}\n")
    cfg = parse_config_file(str(path), cli_vars=["PORT=9100"], environ={})
    assert cfg["server"]["port"] == 9100


def test_parse_config_file_empty(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert parse_config_file(str(path), environ={})["server"]["port"] == 8080


def test_parse_config_file_rejects_non_mapping(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ValueError):
        parse_config_file(str(path), environ={})


def test_parse_config_file_invalid_yaml(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("server: {port: [\n")
    with pytest.raises(ValueError):
        parse_config_file(str(path), environ={})


def test_parse_config_file_schema_error(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("upload: {max_domains: 0}\n")
    with pytest.raises(ValueError) as excinfo:
        parse_config_file(str(path), environ={})
    assert str(path) in str(excinfo.value)
    assert "upload/max_domains" in str(excinfo.value)


def test_resolver_config_from() -> None:
    rc = resolver_config_from(
        load_config({"resolver": {"nameservers": ["192.0.2.1"], "timeout_seconds": 2}}, environ={})
    )
    assert [str(ns) for ns in rc.nameservers] == ["192.0.2.1"]
    assert rc.timeout_seconds == 2.0
    assert rc.port == 53


def test_hostname_nameserver_rejected_at_load() -> None:
    with pytest.raises(ValueError) as excinfo:
        load_config(
            {"vars": {"UPSTREAM": "localhost"}, "resolver": {"nameservers": ["${UPSTREAM}"]}},
            config_path="cfg.yaml",
            environ={},
        )
    assert "Invalid resolver configuration in cfg.yaml" in str(excinfo.value)
