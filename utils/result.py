from typing import Generic, TypeVar, Optional, Any, Dict, Union
from http import HTTPStatus

T = TypeVar('T')  # Generic type variable

INTERNAL_ERROR = "INTERNAL_ERROR"


class Result(Generic[T]):
    """
    A generic result class that represents the outcome of a report operation.

    The report pipeline never raises past its entry point: every failure is
    folded into a failed Result carrying a message, an HTTP status and a
    machine-readable error code that the handler echoes back to the caller.

    Attributes:
        success (bool): Indicates if the operation was successful
        data (Optional[T]): The result data (only present when success is True)
        error (Optional[str]): Error message (only present when success is False)
        code (Optional[str]): Error code such as ENV_VARS_MISSING (failures only)
        status_code (HTTPStatus): HTTP status code (default: 200 for success, 500 for failure)
    """
    def __init__(
        self,
        success: bool,
        data: Optional[T] = None,
        error: Optional[str] = None,
        code: Optional[str] = None,
        status_code: Optional[Union[int, HTTPStatus]] = None
    ):
        """
        Initialize a Result object.

        Args:
            success (bool): Whether the operation succeeded
            data (Optional[T], optional): The data returned by a successful operation. Defaults to None.
            error (Optional[str], optional): Error message for a failed operation. Defaults to None.
            code (Optional[str], optional): Error code for a failed operation. Defaults to None.
            status_code (Optional[Union[int, HTTPStatus]], optional): HTTP status code.
                Defaults to 200 for success, 500 for failure.
        """
        self.success = success
        self.data = data
        self.error = error
        self.code = code

        if status_code is None:
            self.status_code = HTTPStatus.OK if success else HTTPStatus.INTERNAL_SERVER_ERROR
        elif isinstance(status_code, int):
            self.status_code = HTTPStatus(status_code)
        else:
            self.status_code = status_code

    @classmethod
    def ok(cls, data: T, status_code: Optional[Union[int, HTTPStatus]] = HTTPStatus.OK) -> "Result[T]":
        """
        Create a successful Result with the provided data.

        Args:
            data (T): The data to be wrapped in the Result
            status_code (Optional[Union[int, HTTPStatus]], optional): HTTP status code. Defaults to 200 OK.

        Returns:
            Result[T]: A successful Result containing the provided data
        """
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(
        cls,
        error: str,
        code: str = INTERNAL_ERROR,
        status_code: Optional[Union[int, HTTPStatus]] = HTTPStatus.INTERNAL_SERVER_ERROR
    ) -> "Result[T]":
        """
        Create a failed Result with the provided error message and code.

        Args:
            error (str): The error message describing the failure
            code (str, optional): Error code. Defaults to INTERNAL_ERROR.
            status_code (Optional[Union[int, HTTPStatus]], optional): HTTP status code. Defaults to 500.

        Returns:
            Result[T]: A failed Result containing the error message
        """
        return cls(success=False, error=error, code=code, status_code=status_code)

    @classmethod
    def config_error(cls, error: str, code: str) -> "Result[T]":
        """
        Create a failed Result for a configuration problem detected before any network call.

        Args:
            error (str): Which settings are missing or invalid
            code (str): Configuration error code (ENV_VARS_MISSING or ENV_VARS_INVALID)

        Returns:
            Result[T]: A failed Result with 500 status code
        """
        return cls(success=False, error=error, code=code, status_code=HTTPStatus.INTERNAL_SERVER_ERROR)

    @classmethod
    def server_error(cls, error: str = "Unknown error", code: str = INTERNAL_ERROR) -> "Result[T]":
        """
        Create a failed Result with INTERNAL_SERVER_ERROR status code.

        Args:
            error (str, optional): The error message. Defaults to "Unknown error".
            code (str, optional): Error code. Defaults to INTERNAL_ERROR.

        Returns:
            Result[T]: A failed Result with 500 status code
        """
        return cls(success=False, error=error, code=code, status_code=HTTPStatus.INTERNAL_SERVER_ERROR)

    def is_success(self) -> bool:
        """
        Check if the Result represents a successful operation.

        Returns:
            bool: True if the Result is successful, False otherwise
        """
        return self.success

    def is_failure(self) -> bool:
        """
        Check if the Result represents a failed operation.

        Returns:
            bool: True if the Result is a failure, False otherwise
        """
        return not self.success

    def unwrap(self, default: Optional[T] = None) -> Optional[T]:
        """
        Safely access the data value with an optional default value.

        Args:
            default (Optional[T], optional): Value to return if the Result is a failure. Defaults to None.

        Returns:
            Optional[T]: The data value if successful, otherwise the default value
        """
        return self.data if self.is_success() else default

    def to_error_body(self, message: str) -> Dict[str, Any]:
        """
        Build the JSON error body returned to API callers.

        Args:
            message (str): Human readable summary placed under "error"

        Returns:
            Dict[str, Any]: Dictionary with error, code and details keys
        """
        return {
            "error": message,
            "code": self.code or INTERNAL_ERROR,
            "details": self.error or "Unknown error",
        }

    def __str__(self) -> str:
        status_info = f"{self.status_code.value} {self.status_code.phrase}"
        if self.is_success():
            data_repr = str(self.data)
            # Truncate long data representations
            if len(data_repr) > 100:
                data_repr = f"{data_repr[:97]}..."
            return f"Success ({status_info}): {data_repr}"
        return f"Failure ({status_info}) [{self.code}]: {self.error}"

    def __repr__(self) -> str:
        return (
            f"Result(success={self.success}, status_code={self.status_code!r}, "
            f"code={self.code!r}, data={self.data!r}, error={self.error!r})"
        )
