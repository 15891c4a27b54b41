from __future__ import annotations

import logging
import re
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from jarpath.utils.java_version import parse_java_version
from jarpath.utils.quoting import quoted_string_to_list

from .contracts import ATTR_BUILD_JDK, ATTR_CLASS_PATH, ATTR_MAIN_CLASS, RUNTIME_OPTION_ATTRS

log = logging.getLogger("jarpath.source")

WarningSink = Callable[[str], None]

MANIFEST_NAME = "META-INF/MANIFEST.MF"

# Manifests are untrusted input; refuse absurdly large ones.
_MAX_MANIFEST_BYTES = 1024 * 1024

_LINE_BREAK = re.compile(rb"\r\n|\r|\n")
_UTF8_BOM = b"\xef\xbb\xbf"


@dataclass(frozen=True, slots=True)
class ArchiveMetadata:
    """Execution metadata embedded in an archive's manifest.

    Invariant: derived only from the archive's own manifest, so every
    reference to the same archive file yields equal metadata.
    """

    main_class: Optional[str] = None
    runtime_options: Tuple[str, ...] = ()
    build_jdk: int = 0
    class_path: Optional[str] = None


def parse_main_attributes(data: bytes) -> Dict[str, str]:
    """Parse the main section of a JAR manifest.

    Keys are lower-cased (manifest attribute names are case-insensitive).
    Continuation lines start with a single space and are joined as raw bytes
    before decoding, since writers wrap at 72 bytes and may split a multi-byte
    character. The main section ends at the first blank line.

    Raises
    - ValueError: on undecodable bytes or a malformed header line.
    """
    if data.startswith(_UTF8_BOM):
        data = data[len(_UTF8_BOM):]

    headers: List[bytearray] = []
    for line in _LINE_BREAK.split(data):
        if not line:
            break
        if line.startswith(b" "):
            if not headers:
                raise ValueError("manifest continuation line without a header")
            headers[-1] += line[1:]
            continue
        headers.append(bytearray(line))

    attrs: Dict[str, str] = {}
    for raw in headers:
        header = bytes(raw).decode("utf-8")
        name, sep, value = header.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"invalid manifest header: {header[:80]!r}")
        attrs[name.strip().lower()] = value[1:] if value.startswith(" ") else value
    return attrs


def _read_manifest(zf: zipfile.ZipFile) -> Dict[str, str]:
    info = None
    for candidate in zf.infolist():
        if candidate.filename.upper() == MANIFEST_NAME:
            info = candidate
            break
    if info is None:
        return {}
    if info.file_size > _MAX_MANIFEST_BYTES:
        raise ValueError(f"manifest too large: {info.file_size} bytes")
    with zf.open(info, "r") as f:
        data = f.read(_MAX_MANIFEST_BYTES + 1)
    if len(data) > _MAX_MANIFEST_BYTES:
        raise ValueError("manifest too large")
    return parse_main_attributes(data)


def extract_archive_metadata(
    archive_file: Optional[Path | str],
    *,
    location: Optional[str] = None,
    warn: Optional[WarningSink] = None,
) -> ArchiveMetadata:
    """Read execution metadata from an archive, best effort.

    - A missing file yields default metadata without a warning.
    - An unreadable archive or manifest emits one warning naming `location`
      and keeps whatever was read before the failure.
    - Never raises for a damaged, encrypted or unsupported archive.
    - The archive is opened once and always closed.
    """
    if archive_file is None:
        return ArchiveMetadata()
    path = Path(archive_file)
    if not path.exists():
        return ArchiveMetadata()

    sink = warn or log.warning
    main_class: Optional[str] = None
    runtime_options: Tuple[str, ...] = ()
    build_jdk = 0
    class_path: Optional[str] = None
    try:
        with zipfile.ZipFile(path, "r") as zf:
            attrs = _read_manifest(zf)

        main_class = attrs.get(ATTR_MAIN_CLASS.lower())

        val = next((attrs[k.lower()] for k in RUNTIME_OPTION_ATTRS if k.lower() in attrs), None)
        if val is not None:
            runtime_options = tuple(quoted_string_to_list(val))

        ver = attrs.get(ATTR_BUILD_JDK.lower())
        if ver is not None:
            build_jdk = parse_java_version(ver)

        class_path = attrs.get(ATTR_CLASS_PATH.lower())
    except (OSError, EOFError, RuntimeError, NotImplementedError, zipfile.BadZipFile, zlib.error, ValueError):
        # zipfile surfaces corrupt streams as zlib.error or EOFError, encrypted
        # entries as RuntimeError and unknown compression as NotImplementedError.
        sink(f"Problem reading manifest from {location or path}")

    return ArchiveMetadata(
        main_class=main_class,
        runtime_options=runtime_options,
        build_jdk=build_jdk,
        class_path=class_path,
    )
