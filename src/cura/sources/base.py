"""Bundle source discovery and parsing.

The scanner knows about folders and JSON, nothing about FHIR mapping. The
store pairs it with the bundle assembler.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterator, Protocol

logger = logging.getLogger(__name__)

DEFAULT_FOLDER = "data/fhir_bundles"
DEFAULT_FILE_PATTERN = r".*\.json$"


class BundleParseError(Exception):
    """A bundle file could not be read or is not valid JSON."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Cannot parse bundle {path}: {cause}")
        self.path = path
        self.cause = cause


@dataclass
class SourceConfig:
    """Where bundles live and how to treat unreadable ones."""

    folder: str = DEFAULT_FOLDER
    file_pattern: str = DEFAULT_FILE_PATTERN
    # Fail the whole load on the first unreadable file. With strict=False the
    # file is logged and skipped.
    strict: bool = True


@dataclass
class BundleDocument:
    """One parsed bundle file."""

    path: str
    data: Any


class BundleScanner(Protocol):
    """Anything that turns a SourceConfig into parsed bundle documents."""

    def __call__(self, config: SourceConfig) -> Iterator[BundleDocument]:
        ...


def discover_files(input_dir: str, pattern: str = DEFAULT_FILE_PATTERN) -> list[str]:
    """Recursively find files whose name matches a regex pattern.

    A missing directory yields an empty list. The result is sorted, but
    callers must not depend on cross-file ordering.
    """
    if not os.path.isdir(input_dir):
        return []
    files = []
    for dirpath, _dirnames, filenames in os.walk(input_dir):
        for f in filenames:
            if re.match(pattern, f, re.IGNORECASE):
                files.append(os.path.join(dirpath, f))
    return sorted(files)


def read_bundle(path: str) -> BundleDocument:
    """Parse one bundle file.

    Fractional numbers are decoded as Decimal so quantity values keep the
    digits written in the source ("8.20" stays "8.20").
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f, parse_float=Decimal)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise BundleParseError(path, e) from e
    return BundleDocument(path=path, data=data)


def scan_bundles(config: SourceConfig) -> Iterator[BundleDocument]:
    """Yield every parseable bundle under ``config.folder``.

    In strict mode the first unreadable file raises BundleParseError and the
    scan stops there.
    """
    files = discover_files(config.folder, config.file_pattern)
    if not files:
        logger.info("No bundle files found in %s", config.folder)
    for path in files:
        try:
            doc = read_bundle(path)
        except BundleParseError as e:
            if config.strict:
                raise
            logger.warning("Skipping unreadable bundle %s: %s", path, e.cause)
            continue
        logger.debug("Parsed bundle %s", path)
        yield doc
