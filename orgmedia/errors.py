"""Exception hierarchy for orgmedia."""


class OrgMediaError(Exception):
    """Base error for the project."""


class ConfigurationError(OrgMediaError):
    """Invalid command line options or a missing external tool.

    Raised before any file is touched; the run refuses to start.
    """


class MetadataError(OrgMediaError):
    """A metadata extractor failed to run or produced unusable output."""


class FileProcessingError(OrgMediaError):
    """A single file could not be processed. The run continues."""


class PersistentCollisionError(FileProcessingError):
    """Every hash-derived name up to the maximum prefix length is taken."""


class MoveError(FileProcessingError):
    """A file could not be relocated. The source is left in place."""


class SourceRetainedError(MoveError):
    """The copy succeeded but the source could not be removed.

    The content now exists at both the source and the destination.
    """


class PruneError(OrgMediaError):
    """An emptied tag folder could not be listed or removed."""
