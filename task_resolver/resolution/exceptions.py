class TaskError(Exception):
    """Base exception for every declared failure of a resolution request."""


class RequestError(TaskError):
    """Raised when the request carries no question; no handler runs."""


class ParameterError(TaskError):
    """Raised when a required parameter is absent or cannot be parsed."""


class InputError(ParameterError):
    """Raised when a task needs an uploaded file and none was supplied."""


class FormatError(TaskError):
    """Raised when file content does not have the expected structure."""


class ExternalResourceError(TaskError):
    """Raised when a network, archive or database dependency fails."""


class ExecutionError(TaskError):
    """Raised when an external command cannot be run or exits non-zero."""
