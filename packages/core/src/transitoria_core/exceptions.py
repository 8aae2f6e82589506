"""Custom exceptions for the Transitoria review engine.

This module provides a hierarchy of exception classes for consistent error
handling across the engine. All exceptions inherit from TransitoriaError,
making it easy to catch all application-specific errors.

Example:
    try:
        contributions = allocate(txn.amount, txn.allocated_period, txn.date, horizon)
    except InvalidPeriodFormat as e:
        if e.recoverable:
            # Fall back to the booked month
            contributions = allocate(txn.amount, None, txn.date, horizon)
        else:
            raise
    except TransitoriaError as e:
        logger.error("allocation_failed", error=str(e))
"""

from typing import Any, Optional


class TransitoriaError(Exception):
    """Base exception for all Transitoria errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise TransitoriaError("Something went wrong", details={"code": 500})
        TransitoriaError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize TransitoriaError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the caller can recover from the error, for
                example by falling back to a default. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(TransitoriaError):
    """Error raised when data validation fails.

    Attributes:
        field: The field that failed validation.
        value: The invalid value.
        constraint: The validation constraint that was violated.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class InvalidPeriodFormat(ValidationError):
    """An allocated-period label does not match any recognized grammar.

    Raised by the period allocator. Always recoverable: the caller chooses
    whether to attribute the amount to its booked month or to drop it.

    Example:
        >>> raise InvalidPeriodFormat("2024-Q5")
        InvalidPeriodFormat: Invalid allocated period '2024-Q5'
    """

    GRAMMAR = "YYYY-MM, YYYY-Qn (n=1..4) or YYYY-YEAR"

    def __init__(
        self,
        value: Any,
        *,
        field: str = "allocated_period",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"Invalid allocated period {value!r}",
            field=field,
            value=value,
            constraint=self.GRAMMAR,
            details=details,
            recoverable=True,
        )


class DuplicateTransactionError(ValidationError):
    """One or more transaction ids already exist in the store."""

    def __init__(
        self,
        transaction_ids: list[str],
        *,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"Duplicate transaction id(s): {', '.join(transaction_ids)}",
            field="id",
            value=list(transaction_ids),
            constraint="Transaction ids must be unique",
            details=details,
        )
        self.transaction_ids = list(transaction_ids)


class TransactionNotFound(TransitoriaError):
    """A workflow action referenced a transaction id that is not in the store.

    Attributes:
        transaction_id: The unknown id.
    """

    def __init__(
        self,
        transaction_id: str,
        *,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"Transaction not found: {transaction_id}",
            details=details,
            recoverable=True,
        )
        self.transaction_id = transaction_id
        self.details["transaction_id"] = transaction_id


class AgentError(TransitoriaError):
    """Error raised when an AI agent operation fails.

    Attributes:
        agent_name: Name or identifier of the agent that failed.
        operation: The operation the agent was attempting.
        api_error: The underlying API error message (if applicable).
    """

    def __init__(
        self,
        message: str,
        *,
        agent_name: Optional[str] = None,
        operation: Optional[str] = None,
        api_error: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.agent_name = agent_name
        self.operation = operation
        self.api_error = api_error

        if agent_name:
            self.details["agent_name"] = agent_name
        if operation:
            self.details["operation"] = operation
        if api_error:
            self.details["api_error"] = api_error


class ClassificationUnavailable(AgentError):
    """The external classification call failed or returned unusable content.

    Recovered locally: the whole batch is treated as empty and the store is
    left as it was.

    Example:
        >>> raise ClassificationUnavailable(
        ...     "Response is not a JSON object",
        ...     operation="parse_response",
        ... )
        ClassificationUnavailable: Response is not a JSON object
    """

    def __init__(
        self,
        message: str,
        *,
        agent_name: Optional[str] = "transitoria_classifier",
        operation: Optional[str] = None,
        api_error: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            agent_name=agent_name,
            operation=operation,
            api_error=api_error,
            details=details,
            recoverable=True,
        )


class TransactionImportError(TransitoriaError):
    """A ledger export could not be read.

    Attributes:
        source: The file being imported.
        row: 1-based row number that triggered the error (if applicable).
    """

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        row: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.source = source
        self.row = row

        if source:
            self.details["source"] = source
        if row is not None:
            self.details["row"] = row


class ConfigurationError(TransitoriaError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected


__all__ = [
    "TransitoriaError",
    "ValidationError",
    "InvalidPeriodFormat",
    "DuplicateTransactionError",
    "TransactionNotFound",
    "AgentError",
    "ClassificationUnavailable",
    "TransactionImportError",
    "ConfigurationError",
]
