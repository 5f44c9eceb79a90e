class StatusTransportError(Exception):
    """Raised when the status service cannot be reached or answers with a non-2xx status."""

    def __init__(
        self, message: str, status_code: int | None = None, error: str | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = error

    @property
    def is_client_error(self) -> bool:
        """The service answered and rejected the request (4xx)."""
        return self.status_code is not None and 400 <= self.status_code < 500
