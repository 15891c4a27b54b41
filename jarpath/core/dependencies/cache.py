from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .classpath import ArtifactInfo
from .coordinates import parse_coordinate

log = logging.getLogger("jarpath.dependencies")


def _artifact_to_record(artifact: ArtifactInfo) -> Dict[str, Any]:
    return {
        "coordinate": str(artifact.coordinate) if artifact.coordinate is not None else None,
        "file": str(artifact.file),
        "timestamp": artifact.timestamp,
        "module_path": artifact.module_path,
    }


def _artifact_from_record(record: Dict[str, Any]) -> ArtifactInfo:
    coordinate = record.get("coordinate")
    return ArtifactInfo(
        coordinate=parse_coordinate(coordinate) if coordinate else None,
        file=Path(record["file"]),
        timestamp=float(record.get("timestamp") or 0),
        module_path=bool(record.get("module_path")),
    )


@dataclass(slots=True)
class SQLiteDependencyCache:
    """SQLite persistence for resolved dependency lists.

    Each entry maps a resolution key (repository root plus the requested
    coordinates, in order) to the artifacts it resolved to, including the
    file mtimes recorded at resolution time.

    Security notes:
    - Treat all values read from the database as untrusted.
    """

    db_path: Path

    def __post_init__(self) -> None:
        self.db_path = Path(self.db_path).expanduser()

    def connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(str(self.db_path))

    def init_schema(self) -> None:
        with self.connect() as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS resolutions (
                    key TEXT PRIMARY KEY,
                    artifacts_json TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )

    def get(self, key: str) -> Optional[List[ArtifactInfo]]:
        """Return the cached artifacts for `key`, or None if absent or unreadable."""
        self.init_schema()
        with self.connect() as con:
            row = con.execute("SELECT artifacts_json FROM resolutions WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        try:
            return [_artifact_from_record(r) for r in json.loads(row[0])]
        except (ValueError, KeyError, TypeError) as e:
            log.warning("Ignoring corrupt dependency cache entry for %s: %s", key, e)
            self.delete(key)
            return None

    def put(self, key: str, artifacts: List[ArtifactInfo]) -> None:
        payload = json.dumps([_artifact_to_record(a) for a in artifacts], sort_keys=True, separators=(",", ":"))
        self.init_schema()
        with self.connect() as con:
            con.execute(
                "INSERT OR REPLACE INTO resolutions (key, artifacts_json, created_at) VALUES (?, ?, ?)",
                (key, payload, datetime.now(timezone.utc).isoformat()),
            )

    def delete(self, key: str) -> None:
        self.init_schema()
        with self.connect() as con:
            con.execute("DELETE FROM resolutions WHERE key = ?", (key,))
