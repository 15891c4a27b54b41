from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Protocol, Sequence

from jarpath.core.dependencies.classpath import ModularClassPath

from .resource import ResourceRef

if TYPE_CHECKING:
    from .jar_source import JarSource
    from .script_source import ScriptSource

# Reserved manifest attributes (names are case-insensitive).
ATTR_MAIN_CLASS = "Main-Class"
ATTR_CLASS_PATH = "Class-Path"
ATTR_BUILD_JDK = "Build-Jdk"
ATTR_JBANG_JAVA_OPTIONS = "JBang-Java-Options"

# Runtime option attributes, in order of precedence.
RUNTIME_OPTION_ATTRS = (ATTR_JBANG_JAVA_OPTIONS, "JBang-Runtime-Options", "JBang.Java.Options")


class Source(Protocol):
    """Something runnable: a prebuilt archive or a script that builds one."""

    @property
    def resource_ref(self) -> ResourceRef: ...

    @property
    def jar_file(self) -> Optional[Path]: ...

    def as_jar_source(self) -> "JarSource": ...

    def as_script_source(self) -> "ScriptSource": ...

    def all_dependencies(self) -> List[str]:
        """Dependency coordinates declared by the source itself."""
        ...

    def resolve_class_path(self, additional_deps: Sequence[str]) -> ModularClassPath: ...

    @property
    def java_version(self) -> Optional[str]:
        """Minimum runtime version as an "N+" string."""
        ...

    @property
    def main_class(self) -> Optional[str]: ...

    @property
    def runtime_options(self) -> List[str]: ...

    def is_created_jar(self) -> bool:
        """True if the archive was produced by this tool's own build step."""
        ...
