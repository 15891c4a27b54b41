from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jarpath.core.dependencies.coordinates import looks_like_a_gav, parse_coordinate


@dataclass(frozen=True, slots=True)
class ResourceRef:
    """Identifies a runnable archive.

    - original_resource: what the user supplied (coordinate, URL or path)
    - file: the local file the resource resolved to
    """

    original_resource: Optional[str]
    file: Optional[Path]

    @property
    def location(self) -> str:
        """Logical location for messages."""
        if self.original_resource:
            return self.original_resource
        return str(self.file) if self.file is not None else "<unknown>"

    @property
    def is_coordinate(self) -> bool:
        return looks_like_a_gav(self.original_resource)


def resource_ref_for(resource: str, *, local_repository: Path | str) -> ResourceRef:
    """Build a ResourceRef from user input.

    Coordinates map to their artifact inside the local repository; anything
    else is treated as a local file path. The file does not have to exist.
    """
    if looks_like_a_gav(resource):
        coord = parse_coordinate(resource)
        return ResourceRef(original_resource=resource, file=coord.local_path(local_repository))
    return ResourceRef(original_resource=resource, file=Path(resource).expanduser().absolute())
