from .contracts import (
    ATTR_BUILD_JDK,
    ATTR_CLASS_PATH,
    ATTR_JBANG_JAVA_OPTIONS,
    ATTR_MAIN_CLASS,
    Source,
)
from .jar_source import ClassPathStrategy, JarSource, classify_class_path, prepare_jar, resolve_class_path
from .manifest import ArchiveMetadata, extract_archive_metadata, parse_main_attributes
from .resource import ResourceRef, resource_ref_for
from .script_source import ScriptSource

__all__ = [
    "ATTR_MAIN_CLASS",
    "ATTR_CLASS_PATH",
    "ATTR_BUILD_JDK",
    "ATTR_JBANG_JAVA_OPTIONS",
    "Source",
    "ArchiveMetadata",
    "extract_archive_metadata",
    "parse_main_attributes",
    "ResourceRef",
    "resource_ref_for",
    "ScriptSource",
    "ClassPathStrategy",
    "JarSource",
    "classify_class_path",
    "prepare_jar",
    "resolve_class_path",
]
