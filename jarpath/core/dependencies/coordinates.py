from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import InvalidCoordinateError

# group:artifact:version[:classifier][@type]
_GAV_PATTERN = re.compile(
    r"^(?P<group>[^:/\s@]+)"
    r":(?P<artifact>[^:/\s@]+)"
    r":(?P<version>[^:/\s@]+)"
    r"(?::(?P<classifier>[^:/\s@]+))?"
    r"(?:@(?P<type>[^:/\s@]+))?$"
)


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A Maven-style artifact coordinate.

    Notes
    - `type` is the packaging extension used to locate the artifact file.
    - Two coordinates differing only in version share the same `key`.

    """

    group_id: str
    artifact_id: str
    version: str
    classifier: Optional[str] = None
    type: str = "jar"

    @property
    def key(self) -> str:
        """Identity used for deduplication (version-independent)."""
        return f"{self.group_id}:{self.artifact_id}:{self.classifier or ''}:{self.type}"

    @property
    def gav(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def with_type(self, type_: str) -> "Coordinate":
        return Coordinate(self.group_id, self.artifact_id, self.version, None, type_)

    def local_path(self, repository_root: Path | str) -> Path:
        """Location of this artifact inside a Maven-layout repository."""
        name = f"{self.artifact_id}-{self.version}"
        if self.classifier:
            name += f"-{self.classifier}"
        name += f".{self.type}"
        return (
            Path(repository_root)
            / Path(*self.group_id.split("."))
            / self.artifact_id
            / self.version
            / name
        )

    def __str__(self) -> str:
        text = self.gav
        if self.classifier:
            text += f":{self.classifier}"
        if self.type != "jar":
            text += f"@{self.type}"
        return text


def looks_like_a_gav(candidate: Optional[str]) -> bool:
    """Return True if `candidate` is shaped like group:artifact:version.

    File paths and URLs never match: slashes and whitespace are rejected.
    """
    if not candidate:
        return False
    return _GAV_PATTERN.match(candidate) is not None


def parse_coordinate(text: str) -> Coordinate:
    """Parse a coordinate string.

    Raises
    - InvalidCoordinateError: if `text` is not a well-formed coordinate.
    """
    m = _GAV_PATTERN.match(text.strip()) if text else None
    if m is None:
        raise InvalidCoordinateError(f"Invalid dependency coordinate: {text!r}")
    return Coordinate(
        group_id=m.group("group"),
        artifact_id=m.group("artifact"),
        version=m.group("version"),
        classifier=m.group("classifier"),
        type=m.group("type") or "jar",
    )
