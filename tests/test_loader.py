# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for document loading and path-based construction."""

import json

import pytest

from configtree import (
    ConfigArray,
    ConfigNode,
    DocumentIOError,
    DocumentParseError,
    InvalidInputError,
    construct,
    load,
    load_document,
)

CONFIG_YAML = """\
type: test
server:
  dev:
    host: dev-host
    port: 30
  prod:
    host: prod-host
    port: 40
plugins:
  - name: analytics
    path: plugins/analytics
  - name: opengraph
    path: plugins/opengraph
backend:
  mongo:
    url: mongodb://localhost
"""

EXPECTED = {
    'type': 'test',
    'server': {
        'dev': {'host': 'dev-host', 'port': 30},
        'prod': {'host': 'prod-host', 'port': 40},
    },
    'plugins': [
        {'name': 'analytics', 'path': 'plugins/analytics'},
        {'name': 'opengraph', 'path': 'plugins/opengraph'},
    ],
    'backend': {'mongo': {'url': 'mongodb://localhost'}},
}


@pytest.fixture
def yaml_file(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(CONFIG_YAML, encoding='utf-8')
    return path


class TestLoadDocument:
    """Tests for load_document."""

    def test_yaml(self, yaml_file):
        """Test a YAML document loads into plain data."""
        assert load_document(yaml_file) == EXPECTED

    def test_json(self, tmp_path):
        """Test JSON documents load through the YAML parser."""
        path = tmp_path / 'config.json'
        path.write_text(json.dumps(EXPECTED), encoding='utf-8')
        assert load_document(str(path)) == EXPECTED

    def test_missing_file(self, tmp_path):
        """Test an unreadable path raises DocumentIOError."""
        path = tmp_path / 'missing.yaml'
        with pytest.raises(DocumentIOError) as excinfo:
            load_document(path)
        assert excinfo.value.path == path
        assert isinstance(excinfo.value.__cause__, FileNotFoundError)

    def test_directory(self, tmp_path):
        """Test a directory path raises DocumentIOError."""
        with pytest.raises(DocumentIOError):
            load_document(tmp_path)

    def test_malformed(self, tmp_path):
        """Test malformed YAML raises DocumentParseError."""
        path = tmp_path / 'broken.yaml'
        path.write_text('server: [unclosed\n', encoding='utf-8')
        with pytest.raises(DocumentParseError, match='Malformed'):
            load_document(path)

    def test_not_utf8(self, tmp_path):
        """Test undecodable bytes raise DocumentParseError."""
        path = tmp_path / 'binary.yaml'
        path.write_bytes(b'\xff\xfe\x00garbage')
        with pytest.raises(DocumentParseError):
            load_document(path)


class TestConstructFromDocument:
    """Tests for construct() and load() with document paths."""

    def test_construct_from_str_path(self, yaml_file):
        """Test construct accepts a str path."""
        cfg = construct(str(yaml_file))
        assert isinstance(cfg, ConfigNode)
        assert cfg == EXPECTED

    def test_construct_from_pathlike(self, yaml_file):
        """Test construct accepts a pathlib.Path."""
        assert construct(yaml_file).server.dev.host == 'dev-host'

    def test_load(self, yaml_file):
        """Test load() builds a reactive tree."""
        cfg = load(yaml_file)
        events = []
        cfg.on('change', events.append)
        cfg.plugins[0].name = 'stats'
        assert events[0].path == ('plugins', 0, 'name')

    def test_top_level_list_document(self, tmp_path):
        """Test a document holding a list builds a ConfigArray."""
        path = tmp_path / 'list.yaml'
        path.write_text("- '1'\n- '2'\n- 3\n", encoding='utf-8')
        cfg = construct(path)
        assert isinstance(cfg, ConfigArray)
        assert cfg == ['1', '2', 3]

    @pytest.mark.parametrize('content', ['', 'just a string\n', '42\n', 'null\n'])
    def test_scalar_document(self, tmp_path, content):
        """Test documents without a mapping or list are rejected."""
        path = tmp_path / 'scalar.yaml'
        path.write_text(content, encoding='utf-8')
        with pytest.raises(InvalidInputError):
            construct(path)

    def test_errors_propagate(self, tmp_path):
        """Test loader errors reach the caller unchanged."""
        with pytest.raises(DocumentIOError):
            construct(tmp_path / 'missing.yaml')
        with pytest.raises(DocumentIOError):
            load(tmp_path / 'missing.yaml')
