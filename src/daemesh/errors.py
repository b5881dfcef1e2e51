"""Custom exception hierarchy for daemesh."""


class DaeMeshError(Exception):
    """Base exception for all daemesh errors."""


class FileAccessError(DaeMeshError):
    """Raised when an input file cannot be read or an output file cannot be opened."""


class ParseError(DaeMeshError):
    """Raised when the XML is malformed or the geometry structure is unusable."""


class SourceError(DaeMeshError):
    """Raised when a <source> lacks a usable accessor or float array."""


class UnresolvedSourceError(DaeMeshError):
    """Raised when an <input> names a source that cannot be found."""


class ValidationError(DaeMeshError):
    """Raised when a mesh violates the export contract or a warning is promoted."""


class ExportError(DaeMeshError):
    """Raised when DAE serialization fails."""
