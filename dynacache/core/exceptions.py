"""Custom exceptions for dynacache.

The cache layer itself never raises: misses are ``None``. These exceptions
come from the DynamoDB store and configuration layers and are propagated
unmodified through the cache-aside adapter.
"""


class DynacacheError(Exception):
    """Base exception for all dynacache errors.

    All dynacache exceptions inherit from this class, making it easy
    to catch all library-specific errors.
    """

    def __init__(self, message: str, hint: str | None = None):
        """Initialize the exception.

        Args:
            message: The error message
            hint: Optional hint for resolving the error
        """
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class DynamoConnectionError(DynacacheError):
    """Raised when a DynamoDB client cannot be created or reached."""

    def __init__(
        self,
        message: str | None = None,
        original_error: Exception | None = None,
        endpoint: str | None = None,
    ):
        """Initialize the connection error.

        Args:
            message: Custom error message (optional)
            original_error: The original exception that caused this error
            endpoint: The endpoint URL being connected to
        """
        self.original_error = original_error
        self.endpoint = endpoint

        if message:
            final_message = message
            hint = None
        elif original_error:
            final_message, hint = self._format_error(original_error, endpoint)
        else:
            final_message = "Failed to connect to DynamoDB"
            hint = "Check your AWS credentials and network connection."

        super().__init__(final_message, hint)

    def _format_error(
        self, error: Exception, endpoint: str | None
    ) -> tuple[str, str | None]:
        """Format the error message based on the underlying error."""
        error_str = str(error)

        if "Could not connect" in error_str or "Connection refused" in error_str:
            if endpoint and "localhost" in endpoint:
                return (
                    f"Could not connect to DynamoDB at {endpoint}",
                    "If using LocalStack, ensure it's running: docker run -d -p 4566:4566 localstack/localstack",
                )
            return (
                f"Could not connect to DynamoDB at {endpoint or 'AWS'}",
                "Check your network connection and AWS endpoint configuration.",
            )

        if "UnrecognizedClientException" in error_str or "InvalidAccessKeyId" in error_str:
            return (
                "Invalid AWS access key ID",
                "Check your AWS_ACCESS_KEY_ID environment variable.",
            )

        if "InvalidSignatureException" in error_str:
            return (
                "AWS signature mismatch",
                "Check your AWS_SECRET_ACCESS_KEY environment variable.",
            )

        if "ExpiredToken" in error_str:
            return (
                "AWS credentials have expired",
                "Refresh your AWS credentials or generate new access keys.",
            )

        return (f"DynamoDB connection error: {error}", None)


class DynamoOperationError(DynacacheError):
    """Raised when a DynamoDB operation fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        table: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the operation error.

        Args:
            message: The error message
            operation: The DynamoDB operation that failed (e.g., 'put_item')
            table: The table involved in the operation
            original_error: The original exception
        """
        self.operation = operation
        self.table = table
        self.original_error = original_error

        hint = None
        if "ResourceNotFoundException" in message:
            hint = f"The table '{table}' does not exist in this region."
        elif "ProvisionedThroughputExceeded" in message or "ThrottlingException" in message:
            hint = "The table is being throttled. Reduce request rate or raise capacity."
        elif "ValidationException" in message:
            hint = "Check the key attribute names and value types match the table schema."
        elif "AccessDenied" in message:
            hint = "Check your IAM permissions for this operation."

        super().__init__(message, hint)


class ConfigurationError(DynacacheError):
    """Raised when dynacache configuration is invalid."""

    def __init__(
        self,
        message: str | None = None,
        missing_fields: list[str] | None = None,
    ):
        """Initialize the configuration error.

        Args:
            message: Custom error message
            missing_fields: List of missing configuration fields
        """
        self.missing_fields = missing_fields or []

        if missing_fields:
            fields_str = ", ".join(missing_fields)
            message = f"Missing required configuration: {fields_str}"
            hint = "Set these as environment variables or in your .env file."
        else:
            hint = "Check your dynacache configuration."

        super().__init__(message or "Invalid dynacache configuration", hint)
