"""Exception hierarchy for cleanctl.

Per-path filesystem errors never surface as exceptions; they are turned
into path outcomes by the engine. The exceptions below cover failures
that callers are expected to handle.
"""


class CleanctlError(Exception):
    """Base class for all cleanctl errors."""


class CatalogError(CleanctlError):
    """The cleanup catalog could not be loaded or resolved."""


class SettingsError(CleanctlError):
    """The settings file could not be read, validated or written."""


class RegistryAccessDenied(CleanctlError):
    """An auto-start store could not be read or modified."""


class UnsupportedPlatformError(CleanctlError):
    """The requested operation has no backend on this platform."""


class SystemOperationError(CleanctlError):
    """A single-call system operation (e.g. emptying the recycle bin) failed."""
