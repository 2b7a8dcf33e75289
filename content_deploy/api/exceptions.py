"""Exception definitions for content-deploy API"""

from ..constants import ErrorCode


class ContentDeployError(Exception):
    """Base exception for content-deploy"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ConfigError(ContentDeployError):
    """Configuration error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIG_ERROR)


class PackageError(ContentDeployError):
    """Local package error"""
    pass


class NotFoundError(PackageError):
    """No package file matched"""

    def __init__(self, message: str, path: str = None):
        super().__init__(message, ErrorCode.PACKAGE_NOT_FOUND)
        self.path = path


class UnsupportedTypeError(PackageError):
    """Package file is neither a zip nor a jar"""

    def __init__(self, path: str):
        message = f"Unsupported package type (not .zip or .jar): {path}"
        super().__init__(message, ErrorCode.UNSUPPORTED_TYPE)
        self.path = path


class SizeExceededError(PackageError):
    """Package is too large"""

    def __init__(self, path: str, size_mb: int, max_mb: int):
        message = (
            f"Package size {size_mb}MB of {path} exceeds "
            f"allowed max_package_size {max_mb}MB"
        )
        super().__init__(message, ErrorCode.SIZE_EXCEEDED)
        self.path = path
        self.size_mb = size_mb
        self.max_mb = max_mb


class FilterMismatchError(ContentDeployError):
    """Declared filters do not match the approved reference list

    Signals a content-scope change that needs operator review rather than
    an infrastructure fault.
    """

    def __init__(self, message: str, unmatched=None):
        super().__init__(message, ErrorCode.FILTER_MISMATCH)
        self.unmatched = list(unmatched or [])


class RemoteDiscoveryAmbiguous(ContentDeployError):
    """Remote package location could not be determined from the listing"""

    def __init__(self, message: str, target=None):
        super().__init__(message, ErrorCode.DISCOVERY_AMBIGUOUS)
        self.target = target


class TargetError(ContentDeployError):
    """Failure talking to a single deployment target"""

    def __init__(self, message: str, target, error_code: str, response: str = None):
        super().__init__(message, error_code)
        self.target = target
        self.response = response


class UploadFailure(TargetError):
    """Package upload failed"""

    def __init__(self, message: str, target, response: str = None):
        super().__init__(message, target, ErrorCode.UPLOAD_FAILED, response)


class InstallFailure(TargetError):
    """Package install failed or did not report success"""

    def __init__(self, message: str, target, response: str = None):
        super().__init__(message, target, ErrorCode.INSTALL_FAILED, response)
