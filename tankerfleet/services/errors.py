class ServiceError(Exception):
    """Recoverable failure surfaced to the caller with a user-facing message."""
    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(ServiceError):
    def __init__(self, message):
        super().__init__(message, status_code=404)
