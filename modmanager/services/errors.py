class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        self.message = message


class InvalidPath(ServiceError):
    status_code = 400


class NotFound(ServiceError):
    status_code = 404


class AlreadyExists(ServiceError):
    status_code = 409


class UnsupportedFileType(ServiceError):
    status_code = 400


class NotAFile(ServiceError):
    status_code = 400


class NotADirectory(ServiceError):
    status_code = 400


class NotAModFile(ServiceError):
    status_code = 400


class TooLarge(ServiceError):
    status_code = 400


class NotText(ServiceError):
    status_code = 400


class ControllerError(ServiceError):
    status_code = 500
