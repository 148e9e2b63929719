class DynamoDbLocalError(Exception):
    """Base class for launcher failures."""


class InstallError(DynamoDbLocalError):
    """The emulator could not be installed into the install directory."""


class DownloadError(InstallError):
    """Fetching the distribution archive failed."""

    def __init__(self, message, status_code=None, location=None):
        super().__init__(message)
        self.status_code = status_code
        self.location = location


class LaunchError(DynamoDbLocalError):
    """The emulator process could not be started."""
