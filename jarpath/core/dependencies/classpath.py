from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from .coordinates import Coordinate


@dataclass(frozen=True, slots=True)
class ArtifactInfo:
    """A single resolved classpath entry.

    - coordinate: None for literal paths (e.g. entries taken from a manifest)
    - timestamp: file mtime recorded at resolution time, 0 means "not recorded"
    - module_path: True if the entry belongs on the module path
    """

    coordinate: Optional[Coordinate]
    file: Path
    timestamp: float = 0
    module_path: bool = False

    def is_up_to_date(self) -> bool:
        """Return True if the file is still readable and unchanged."""
        try:
            st = os.stat(self.file)
        except OSError:
            return False
        if not os.access(self.file, os.R_OK):
            return False
        return self.timestamp == 0 or st.st_mtime == self.timestamp


class ModularClassPath:
    """An ordered list of resolved artifacts plus a validity flag.

    The container keeps artifacts exactly as given; producers (resolvers) are
    responsible for deduplication. `valid` is decided by the producer.

    Complexity
    - construction / class_path: O(n)
    """

    def __init__(self, artifacts: Iterable[ArtifactInfo], *, valid: bool = True) -> None:
        self._artifacts: Tuple[ArtifactInfo, ...] = tuple(artifacts)
        self._valid = bool(valid)

    @classmethod
    def empty(cls) -> "ModularClassPath":
        return cls(())

    @classmethod
    def from_manifest_class_path(cls, class_path: str) -> "ModularClassPath":
        """Build a classpath from a literal os.pathsep-separated string.

        Entries are taken verbatim; nothing is resolved or checked.
        """
        entries = [e for e in class_path.split(os.pathsep) if e.strip()]
        return cls(ArtifactInfo(coordinate=None, file=Path(e.strip())) for e in entries)

    @property
    def artifacts(self) -> List[ArtifactInfo]:
        return list(self._artifacts)

    @property
    def is_valid(self) -> bool:
        return self._valid

    @property
    def class_paths(self) -> List[str]:
        return [str(a.file) for a in self._artifacts]

    @property
    def class_path(self) -> str:
        return os.pathsep.join(self.class_paths)

    @property
    def module_path_entries(self) -> List[ArtifactInfo]:
        return [a for a in self._artifacts if a.module_path]

    @property
    def class_path_entries(self) -> List[ArtifactInfo]:
        return [a for a in self._artifacts if not a.module_path]

    def auto_detected_module_arguments(self) -> List[str]:
        """Runtime arguments placing module-path entries on --module-path."""
        mods = self.module_path_entries
        if not mods:
            return []
        names: List[str] = []
        for a in mods:
            if a.coordinate is None:
                continue
            name = a.coordinate.artifact_id.replace("-", ".")
            if name not in names:
                names.append(name)
        args = ["--module-path", os.pathsep.join(str(a.file) for a in mods)]
        if names:
            args.append("--add-modules=" + ",".join(names))
        return args

    def __len__(self) -> int:
        return len(self._artifacts)

    def __iter__(self) -> Iterator[ArtifactInfo]:
        return iter(self._artifacts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModularClassPath):
            return NotImplemented
        return self._artifacts == other._artifacts and self._valid == other._valid

    def __repr__(self) -> str:
        return f"ModularClassPath({self.class_paths!r}, valid={self._valid})"
