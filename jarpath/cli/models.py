from __future__ import annotations

from pydantic import BaseModel, Field
from typing import List, Optional


class ArtifactOut(BaseModel):
    """A single classpath entry."""

    path: str
    coordinate: Optional[str] = None
    module_path: bool = False


class ClassPathOut(BaseModel):
    """A resolved classpath."""

    strategy: str
    valid: bool
    class_path: str
    artifacts: List[ArtifactOut] = Field(default_factory=list)


class JarInfoOut(BaseModel):
    """Execution metadata read from a JAR manifest."""

    resource: str
    jar_file: Optional[str] = None
    exists: bool
    main_class: Optional[str] = None
    java_version: str
    runtime_options: List[str] = Field(default_factory=list)
    embedded_class_path: Optional[str] = None


class CheckOut(BaseModel):
    """Up-to-date check result."""

    resource: str
    up_to_date: bool
