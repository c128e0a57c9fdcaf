"""Errors raised by the incoming-directory and API layers."""


class LicenseReportError(Exception):
    """Base class; ``status_code`` is the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidUploadError(LicenseReportError):
    status_code = 400


class ReportNotFoundError(LicenseReportError):
    status_code = 404


class DuplicateReportError(LicenseReportError):
    status_code = 409

    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__(f"File already exists: {file_name}")
