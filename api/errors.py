"""Exam engine error taxonomy, mapped to HTTP responses by the app."""


class ExamEngineError(Exception):
    """Base exception for exam engine errors."""

    status_code = 500

    def __init__(self, message: str, code: str = "EXAM_ENGINE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(ExamEngineError):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, "VALIDATION_ERROR")


class AuthorizationError(ExamEngineError):
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, "FORBIDDEN")


class NotFoundError(ExamEngineError):
    status_code = 404

    def __init__(self, message: str):
        super().__init__(message, "NOT_FOUND")


class ConflictError(ExamEngineError):
    status_code = 409

    def __init__(self, message: str = "You have already submitted this test"):
        super().__init__(message, "ALREADY_SUBMITTED")
