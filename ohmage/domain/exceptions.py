"""
Domain exceptions
"""


class DomainError(Exception):
    """Raised when campaign configuration or a response value is invalid"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConditionParseError(DomainError):
    """Raised when a condition string does not follow the condition grammar"""
