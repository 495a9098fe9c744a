"""Error taxonomy for deal document access.

Every failure a caller can observe maps to exactly one of these classes.
Validation-class errors (401/403/404/400) are raised before any state is
mutated; InternalError wraps downstream failures and is always logged with
its originating cause by the raising service.
"""


class DocumentAccessError(Exception):
    """Base class for errors rendered as a structured JSON body."""

    status_code: int = 500
    error_code: str = "internal_error"
    default_message: str = "An unexpected error occurred. Please try again later."

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(DocumentAccessError):
    """No bearer credential was supplied."""

    status_code = 401
    error_code = "unauthenticated"
    default_message = "No token provided"


class ForbiddenError(DocumentAccessError):
    """Credential rejected, or caller is not a participant of the deal."""

    status_code = 403
    error_code = "forbidden"
    default_message = "Access denied"


class NotFoundError(DocumentAccessError):
    """Deal or file record does not exist."""

    status_code = 404
    error_code = "not_found"
    default_message = "Resource not found"


class InvalidRequestError(DocumentAccessError):
    """Missing fields, disallowed type, or spoofed content."""

    status_code = 400
    error_code = "invalid_request"
    default_message = "Invalid request"


class InternalError(DocumentAccessError):
    """Downstream dependency failure or unexpected exception."""

    status_code = 500
    error_code = "internal_error"


class DownloadAbortedError(Exception):
    """A download failed after its response headers were committed.

    Not a DocumentAccessError: the status line is already on the wire, so no
    exception handler may try to render a body. Raising it out of the ASGI
    app makes the server drop the connection.
    """

    def __init__(self, deal_id: str, file_id: str, bytes_sent: int):
        self.deal_id = deal_id
        self.file_id = file_id
        self.bytes_sent = bytes_sent
        super().__init__(
            f"Download of file {file_id} in deal {deal_id} aborted after {bytes_sent} bytes"
        )
