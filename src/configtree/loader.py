# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Config document loading.

Documents are read as UTF-8 and parsed with PyYAML's ``safe_load``. YAML is
a superset of JSON, so ``.json`` files load as well.
"""

from __future__ import annotations

import logging
from os import PathLike
from pathlib import Path
from typing import Any

import yaml

from .exceptions import DocumentIOError, DocumentParseError

logger = logging.getLogger(__name__)


def load_document(path: str | PathLike) -> Any:
    """Load a YAML/JSON document into plain Python data.

    Args:
        path: Path of the document.

    Returns:
        The parsed document: dicts, lists and scalars.

    Raises:
        DocumentIOError: If the file cannot be read.
        DocumentParseError: If the file is not valid UTF-8 YAML.
    """
    logger.debug("Loading config document %s", path)
    try:
        text = Path(path).read_text(encoding='utf-8')
    except OSError as exc:
        raise DocumentIOError(f"Cannot read config document '{path}': {exc}", path) from exc
    except UnicodeDecodeError as exc:
        raise DocumentParseError(f"Config document '{path}' is not UTF-8: {exc}", path) from exc

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DocumentParseError(f"Malformed config document '{path}': {exc}", path) from exc
