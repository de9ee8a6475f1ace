"""Application exceptions rendered as ``{"message": ...}`` JSON by main.py."""


class AppException(Exception):
    """Base for errors that map to an HTTP status."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(detail)


class FileNotFound(AppException):
    def __init__(self, detail: str = "File not found"):
        super().__init__(404, detail)


class InvalidFileData(AppException):
    """Malformed create request."""

    def __init__(self, detail: str = "Invalid file data"):
        super().__init__(400, detail)


class InvalidFileContent(AppException):
    """Stored content cannot be decoded as a data URI."""

    def __init__(self, detail: str = "File content is not a valid data URI"):
        super().__init__(422, detail)
