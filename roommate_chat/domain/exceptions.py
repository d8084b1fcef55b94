# roommate_chat/domain/exceptions.py


class ChatError(Exception):
    status_code: int = 400

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ChatError):
    def __init__(self, message: str = "Invalid input") -> None:
        super().__init__(message, status_code=400)


class InvalidOperationError(ChatError):
    def __init__(self, message: str = "Operation not allowed") -> None:
        super().__init__(message, status_code=400)


class AuthenticationError(ChatError):
    def __init__(self, message: str = "Not authorized to access this route") -> None:
        super().__init__(message, status_code=401)


class ForbiddenError(ChatError):
    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, status_code=403)


class NotFoundError(ChatError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=404)
