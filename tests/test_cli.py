"""Tests for the command line interface."""

import json
import logging

import pytest
import yaml

from logguard.cli import main
from logguard.examples import EXAMPLE_SOURCE
from logguard.logging_utils import PACKAGE_LOGGER

FACADE_CONFIG = """\
classpath:
  - org.apache.commons.logging.Log
  - org.apache.commons.logging.LogFactory
"""


@pytest.fixture(autouse=True)
def restore_package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    saved = (logger.level, logger.handlers[:])
    yield
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(saved[0])
    for handler in saved[1]:
        logger.addHandler(handler)


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "Foo.groovy"
    path.write_text(EXAMPLE_SOURCE)
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "logguard.yaml"
    path.write_text(FACADE_CONFIG)
    return path


def test_transform_to_stdout(source_file, config_file, capsys):
    assert main(["--config", str(config_file), "transform", str(source_file)]) == 0
    out = capsys.readouterr().out
    assert "private static final transient org.apache.commons.logging.Log log" in out
    assert 'log.isDebugEnabled() ? log.debug("hi") : null' in out


def test_transform_to_file_with_report(source_file, config_file, tmp_path, capsys):
    output = tmp_path / "Foo.out.groovy"
    code = main(
        ["--config", str(config_file), "transform", str(source_file), "-o", str(output), "--report", "json", "--check"]
    )
    assert code == 0
    assert "log.isInfoEnabled()" in output.read_text(encoding="utf-8")

    report = json.loads(capsys.readouterr().err)
    assert report["unit"] == "Foo"
    assert report["total_wrapped_calls"] == 2


def test_yaml_report(source_file, config_file, capsys):
    main(["--config", str(config_file), "transform", str(source_file), "--report", "yaml"])
    err = capsys.readouterr().err
    assert yaml.safe_load(err[err.index("unit:"):])["total_wrapped_calls"] == 2


def test_check_fails_without_facade(source_file, capsys):
    assert main(["transform", str(source_file), "--check"]) == 1
    assert "Unable to resolve class org.apache.commons.logging.Log" in capsys.readouterr().err


def test_duplicate_field_exit_code(tmp_path, capsys):
    path = tmp_path / "Bad.groovy"
    path.write_text("@Commons class Bad { def log = null }")
    assert main(["transform", str(path)]) == 1
    assert "cannot declare a field named 'log'" in capsys.readouterr().err


def test_parse_error_exit_code(tmp_path, capsys):
    path = tmp_path / "Bad.groovy"
    path.write_text("class {")
    assert main(["analyze", str(path)]) == 1
    assert "line 1" in capsys.readouterr().err


def test_invalid_utf8_exit_code(tmp_path, capsys):
    path = tmp_path / "Foo.groovy"
    path.write_bytes(b"@Commons class Foo { }\xff")
    assert main(["transform", str(path)]) == 1
    assert "not valid UTF-8" in capsys.readouterr().err


def test_missing_source(tmp_path, capsys):
    assert main(["analyze", str(tmp_path / "missing.groovy")]) == 1
    assert "Source file not found" in capsys.readouterr().err


def test_missing_config(source_file, tmp_path, capsys):
    assert main(["--config", str(tmp_path / "nope.yaml"), "analyze", str(source_file)]) == 1
    assert "Config file not found" in capsys.readouterr().err


def test_analyze(source_file, capsys):
    assert main(["analyze", str(source_file)]) == 0
    out = capsys.readouterr().out
    assert "Unit: Foo" in out
    assert "Unguarded logging calls: 2" in out
    assert "Foo is annotated but not transformed" in out


def test_subcommand_required(capsys):
    with pytest.raises(SystemExit):
        main([])
