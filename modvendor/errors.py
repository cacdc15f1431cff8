"""Error types raised by modvendor.

Every failure is fatal for the run; the CLI reports the message and exits.
"""


class VendorError(RuntimeError):
    """Base class for all modvendor failures."""


class PreconditionError(VendorError):
    """Raised when the project is not ready to be vendored (missing files, empty flags)."""


class ManifestError(VendorError):
    """Raised when ``vendor/modules.txt`` cannot be interpreted."""


class ResolutionError(VendorError):
    """Raised when a module cannot be located in the module cache."""


class PatternError(VendorError):
    """Raised for a malformed copy glob pattern."""


class ConsistencyError(VendorError):
    """Raised when a selected file does not belong to its module directory."""


class CopyError(VendorError):
    """Raised when a file cannot be copied into the vendor tree."""
