"""
Exception hierarchy for mesh_formats decoding.

Every decode failure aborts the current file and is reported to the caller
as a subclass of MeshDecodeError. Nothing is retried: decoding is
deterministic and a retry would reproduce the same failure.
"""


class MeshDecodeError(Exception):
    """
    Base exception for all mesh decoding failures.

    Carries a programmatic error code and a dictionary of context so callers
    can dispatch on the failure kind without parsing messages.
    """
    def __init__(self, message: str, error_code: str = None, details: dict = None):
        """
        Initialize mesh decode error.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.error_code = error_code or "DECODE_ERROR"
        self.details = details or {}
        self.message = message

    def __str__(self):
        if self.details:
            return f"{self.message} (Code: {self.error_code}, Details: {self.details})"
        return f"{self.message} (Code: {self.error_code})"


class OutOfBoundsError(MeshDecodeError):
    """
    Internal cursor overrun.

    Raised by BinaryCursor when a read or seek would pass the end of the
    buffer. Decoders convert it to TruncatedError at their boundary.
    """
    def __init__(self, message: str, offset: int = None, size: int = None,
                 length: int = None, **kwargs):
        super().__init__(message, error_code="OUT_OF_BOUNDS", **kwargs)
        self.offset = offset
        self.size = size
        self.length = length
        if offset is not None:
            self.details["offset"] = offset
        if size is not None:
            self.details["size"] = size
        if length is not None:
            self.details["length"] = length


class TruncatedError(MeshDecodeError):
    """
    Buffer shorter than a structurally required length.
    """
    def __init__(self, message: str, required: int = None, available: int = None, **kwargs):
        super().__init__(message, error_code="TRUNCATED", **kwargs)
        self.required = required
        self.available = available
        if required is not None:
            self.details["required"] = required
        if available is not None:
            self.details["available"] = available


class BadSignatureError(MeshDecodeError):
    """
    Magic number did not match any accepted signature.
    """
    def __init__(self, message: str, signature: bytes = None, **kwargs):
        super().__init__(message, error_code="BAD_SIGNATURE", **kwargs)
        self.signature = signature
        if signature is not None:
            self.details["signature"] = signature


class UnsupportedVersionError(MeshDecodeError):
    """
    Version field outside the accepted value.
    """
    def __init__(self, message: str, version: int = None, expected: int = None, **kwargs):
        super().__init__(message, error_code="UNSUPPORTED_VERSION", **kwargs)
        self.version = version
        self.expected = expected
        if version is not None:
            self.details["version"] = version
        if expected is not None:
            self.details["expected"] = expected


class EmptyModelError(MeshDecodeError):
    """
    Zero faces, vertices or frames where at least one is required.
    """
    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="EMPTY_MODEL", **kwargs)


class InvalidVertexCountError(MeshDecodeError):
    """
    Decoded position count is not a multiple of three.
    """
    def __init__(self, message: str, vertex_count: int = None, **kwargs):
        super().__init__(message, error_code="INVALID_VERTEX_COUNT", **kwargs)
        self.vertex_count = vertex_count
        if vertex_count is not None:
            self.details["vertex_count"] = vertex_count


class NormalMismatchError(MeshDecodeError):
    """
    Decoded normal count differs from the position count.
    """
    def __init__(self, message: str, normal_count: int = None, vertex_count: int = None, **kwargs):
        super().__init__(message, error_code="NORMAL_MISMATCH", **kwargs)
        self.normal_count = normal_count
        self.vertex_count = vertex_count
        self.details.update({
            "normal_count": normal_count,
            "vertex_count": vertex_count
        })


class MalformedNumberError(MeshDecodeError):
    """
    A token expected to be a floating-point literal failed to parse.
    """
    def __init__(self, message: str, token: str = None, token_index: int = None, **kwargs):
        super().__init__(message, error_code="MALFORMED_NUMBER", **kwargs)
        self.token = token
        self.token_index = token_index
        if token is not None:
            self.details["token"] = token
        if token_index is not None:
            self.details["token_index"] = token_index


class LimitExceededError(MeshDecodeError):
    """
    A count field is negative or exceeds the format's documented maximum.
    """
    def __init__(self, message: str, field: str = None, value: int = None, limit: int = None, **kwargs):
        super().__init__(message, error_code="LIMIT_EXCEEDED", **kwargs)
        self.field = field
        self.value = value
        self.limit = limit
        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if limit is not None:
            self.details["limit"] = limit


class UnknownFormatError(MeshDecodeError):
    """
    Input could not be classified as any supported format.
    """
    def __init__(self, message: str, source_file: str = None, **kwargs):
        super().__init__(message, error_code="UNKNOWN_FORMAT", **kwargs)
        self.source_file = source_file
        if source_file:
            self.details["file"] = source_file


class ConfigurationError(MeshDecodeError):
    """
    Exception for configuration file and parameter errors.

    Raised when configuration files are unreadable, contain unknown keys,
    or hold values outside the accepted range.
    """
    def __init__(self, message: str, config_file: str = None, invalid_parameters: list = None, **kwargs):
        super().__init__(message, error_code="CONFIGURATION_ERROR", **kwargs)
        self.config_file = config_file
        self.invalid_parameters = invalid_parameters or []
        if config_file:
            self.details["config_file"] = config_file
        if invalid_parameters:
            self.details["invalid_parameters"] = invalid_parameters


# Convenience functions for common error scenarios

def raise_truncated(message: str, required: int = None, available: int = None, **kwargs):
    """Raise a TruncatedError with the required and available byte counts."""
    raise TruncatedError(message, required=required, available=available, **kwargs)


def raise_limit_exceeded(field: str, value: int, limit: int, **kwargs):
    """Raise a LimitExceededError for a count field outside [0, limit]."""
    raise LimitExceededError(f"{field} = {value} is outside the allowed range [0, {limit}]",
                             field=field, value=value, limit=limit, **kwargs)
