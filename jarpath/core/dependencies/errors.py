class DependencyError(Exception):
    """
    Base exception for all dependency-related failures.
    """

    pass


class InvalidCoordinateError(DependencyError):
    """
    Raised when a string is not a well-formed group:artifact:version coordinate.
    """

    pass


class ResolutionError(DependencyError):
    """
    Raised when one or more coordinates cannot be resolved into artifacts.
    """

    pass


class ArtifactNotFoundError(ResolutionError):
    """
    Raised when a coordinate resolves to an artifact that is not present.
    """

    def __init__(self, coordinate: str, path: str) -> None:
        super().__init__(f"Could not find artifact {coordinate} at {path}")
        self.coordinate = coordinate
        self.path = path
