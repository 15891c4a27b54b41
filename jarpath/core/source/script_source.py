from __future__ import annotations

from pathlib import Path
from threading import Lock
from typing import TYPE_CHECKING, Optional

from .resource import ResourceRef

if TYPE_CHECKING:
    from .jar_source import JarSource


class ScriptSource:
    """The same resource viewed as a source script.

    Contents are read on demand; nothing is parsed or compiled here.
    """

    def __init__(self, resource_ref: ResourceRef, jar_file: Optional[Path] = None) -> None:
        self._resource_ref = resource_ref
        self._jar_file = jar_file if jar_file is not None else resource_ref.file
        self._jar_source: Optional["JarSource"] = None
        self._lock = Lock()

    @classmethod
    def prepare_script(cls, resource_ref: ResourceRef, jar_file: Optional[Path] = None) -> "ScriptSource":
        return cls(resource_ref, jar_file)

    @property
    def resource_ref(self) -> ResourceRef:
        return self._resource_ref

    @property
    def jar_file(self) -> Optional[Path]:
        return self._jar_file

    def contents(self, encoding: str = "utf-8") -> str:
        if self._resource_ref.file is None:
            raise FileNotFoundError(f"No local file for {self._resource_ref.location}")
        return self._resource_ref.file.read_text(encoding=encoding)

    def as_script_source(self) -> "ScriptSource":
        return self

    def as_jar_source(self) -> "JarSource":
        if self._jar_source is None:
            with self._lock:
                if self._jar_source is None:
                    from .jar_source import JarSource

                    self._jar_source = JarSource.from_script_source(self)
        return self._jar_source
