"""Error taxonomy for the admin API.

Services raise these; ``main.py`` turns them into the ``{"success": false,
"error": ...}`` envelope with the matching status code.
"""


class AdminError(Exception):
    """Base class for errors reported to API callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AdminError):
    """Missing required field or malformed slug."""

    status_code = 400


class InvalidFormatError(AdminError):
    """Post file whose frontmatter cannot be decoded."""

    status_code = 400


class NotFoundError(AdminError):
    """No post file for the requested slug."""

    status_code = 404


class UnsupportedTypeError(AdminError):
    """Upload rejected by the MIME allow-list or size limit."""

    status_code = 400


class StorageError(AdminError):
    """Filesystem failure while reading or writing content."""

    status_code = 500
