"""Errors raised by the core and rendered by the web layer."""


class TaskDownloaderError(Exception):
    http_status = 500
    message = "Internal error"

    def __init__(self, message=None):
        super().__init__(message or self.message)


class CapacityExceeded(TaskDownloaderError):
    http_status = 503
    message = "Exceeding the maximum number of tasks (server is busy)"


class TaskNotFound(TaskDownloaderError):
    http_status = 404
    message = "Task not found"


class UnsupportedType(TaskDownloaderError):
    http_status = 415
    message = "Object has not good file type"


class ProbeFailed(TaskDownloaderError):
    http_status = 502
    message = "Error receiving file information"


class TransferError(TaskDownloaderError):
    http_status = 502
    message = "Error downloading file"


class MethodNotAllowed(TaskDownloaderError):
    http_status = 405
    message = "Method is not used"


class UnsupportedOperation(TaskDownloaderError):
    http_status = 501
    message = "Method with this parameter not released"


class InvalidRequest(TaskDownloaderError):
    http_status = 400
    message = "Incorrect use of the method"


class ServiceStopping(TaskDownloaderError):
    http_status = 503
    message = "The server is stopping"
