from __future__ import annotations


class BundleError(Exception):
    """Base class for every failure reported by the bundler."""


class BundleValidationError(BundleError):
    """Options are unusable (no languages, or none of them known)."""


class BundlePathError(BundleError):
    """The output file cannot be created because its directory is missing."""

    def __init__(self, path, message: str = "File path is not valid"):
        super().__init__(message)
        self.path = path


class BundleConfigError(BundleError):
    """A defaults file could not be read or does not have the expected shape."""
