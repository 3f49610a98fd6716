from __future__ import annotations

import logging

from tsunami import builder
from tsunami.config import ENV_HEXDUMP_BYTES, ENV_OUT_DIR, FormatConfig, get_config, load_config
from tsunami.format.header import BYTECODE_VERSION, Header
from tsunami.format.module import default_header


def test_bundled_defaults() -> None:
    cfg = load_config(env={})
    assert cfg == FormatConfig()
    assert not hasattr(cfg, "version")
    assert cfg.output_dir == "out"


def test_environment_overrides() -> None:
    cfg = load_config(env={ENV_OUT_DIR: "/tmp/artefacts", ENV_HEXDUMP_BYTES: "0x20"})
    assert cfg.output_dir == "/tmp/artefacts"
    assert cfg.hexdump_max_bytes == 32


def test_invalid_hexdump_override_is_ignored(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="tsunami.config"):
        cfg = load_config(env={ENV_HEXDUMP_BYTES: "lots"})
    assert cfg.hexdump_max_bytes == 64
    assert "not an integer" in caplog.text
    assert load_config(env={ENV_HEXDUMP_BYTES: "-4"}).hexdump_max_bytes == 64


def test_custom_header_fields_flow_into_modules() -> None:
    cfg = load_config({"header": {"flags": 3, "typesize": 4}}, env={})
    header = default_header(cfg)
    assert (header.version, header.flags, header.typesize, header.numbersize) == (2, 3, 4, 8)


def test_get_config_reads_environment(out_dir) -> None:
    assert get_config().output_dir == str(out_dir)
    assert get_config() is get_config()


def test_builders_use_active_header() -> None:
    assert Header.unpack(builder.create_push_nil()).flags == get_config().flags


def test_header_version_is_not_configurable() -> None:
    cfg = load_config({"header": {"version": 9, "flags": 1}}, env={})
    header = default_header(cfg)
    assert header.version == BYTECODE_VERSION
    assert header.flags == 1
