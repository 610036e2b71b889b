"""Configuration errors raised while constructing receivers.

Every error names the settings field it concerns so callers can point the
user at the offending option without parsing the message.
"""

from typing import Any, Optional


class ReceiverConfigError(Exception):
    """Base error for invalid receiver settings."""

    def __init__(
        self,
        message: str = "invalid receiver settings",
        field: Optional[str] = None
    ):
        self.message = message
        self.field = field
        super().__init__(self.message)


class SettingsDecodeError(ReceiverConfigError):
    """Raised when the raw settings document cannot be decoded."""

    def __init__(self, reason: str = ""):
        message = "failed to unmarshal settings"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message)


class MissingFieldError(ReceiverConfigError):
    """Raised when a required setting is absent or empty."""

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        super().__init__(
            message=message or f"required field '{field}' is not specified",
            field=field
        )


class MissingURLError(MissingFieldError):
    def __init__(self, message: str = "could not find url property in settings", field: str = "url"):
        super().__init__(message=message, field=field)


class MissingUserKeyError(MissingFieldError):
    def __init__(self):
        super().__init__(message="user key not found", field="userKey")


class MissingAPITokenError(MissingFieldError):
    def __init__(self):
        super().__init__(message="API token not found", field="apiToken")


class MissingIntegrationKeyError(MissingFieldError):
    def __init__(self):
        super().__init__(
            message="could not find integration key property in settings",
            field="integrationKey"
        )


class MissingEndpointError(MissingFieldError):
    def __init__(self):
        super().__init__(
            message="could not find kafka rest proxy endpoint property in settings",
            field="kafkaRestProxy"
        )


class MissingTopicError(MissingFieldError):
    def __init__(self):
        super().__init__(
            message="could not find kafka topic property in settings",
            field="kafkaTopic"
        )


class MissingClusterIDError(MissingFieldError):
    def __init__(self):
        super().__init__(
            message="kafka cluster id must be provided when using api version 3",
            field="kafkaClusterId"
        )


class MutuallyExclusiveOptionsError(ReceiverConfigError):
    """Raised when two options that exclude each other are both set."""

    def __init__(self, message: str, first: str, second: str):
        self.options = (first, second)
        super().__init__(message=message, field=first)


class UnsupportedOptionError(ReceiverConfigError):
    """Raised when an enumerated option has a value outside its domain."""

    def __init__(self, message: str, field: str, value: Any = None):
        self.value = value
        super().__init__(message=message, field=field)


class FieldNotNumericError(ReceiverConfigError):
    """Raised when a numeric setting cannot be read as an integer."""

    def __init__(self, field: str, value: Any, message: Optional[str] = None):
        self.value = value
        super().__init__(
            message=message or f"field '{field}' is not an integer: {value!r}",
            field=field
        )


class UnknownReceiverTypeError(ReceiverConfigError):
    """Raised when no receiver is registered for a type tag."""

    def __init__(self, receiver_type: str):
        self.receiver_type = receiver_type
        super().__init__(message=f"unknown receiver type: {receiver_type}", field="type")
