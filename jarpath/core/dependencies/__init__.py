from .cache import SQLiteDependencyCache
from .classpath import ArtifactInfo, ModularClassPath
from .coordinates import Coordinate, looks_like_a_gav, parse_coordinate
from .errors import ArtifactNotFoundError, DependencyError, InvalidCoordinateError, ResolutionError
from .resolver import DependencyResolver, LocalRepositoryResolver

__all__ = [
    "ArtifactInfo",
    "ModularClassPath",
    "Coordinate",
    "looks_like_a_gav",
    "parse_coordinate",
    "DependencyError",
    "InvalidCoordinateError",
    "ResolutionError",
    "ArtifactNotFoundError",
    "DependencyResolver",
    "LocalRepositoryResolver",
    "SQLiteDependencyCache",
]
