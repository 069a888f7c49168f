"""Errors raised while deploying a stage."""

from typing import Optional


class DeployError(Exception):
    """Base class for every failure of a region deployment."""


class ConfigurationError(DeployError):
    """The project or the invocation options are not usable."""


class RemoteCallError(DeployError):
    """An AWS API call failed."""

    def __init__(self, message: str, service: str = None, operation: str = None,
                 status_code: Optional[int] = None, error_code: str = None):
        super().__init__(message)
        self.message = message
        self.service = service
        self.operation = operation
        self.status_code = status_code
        self.error_code = error_code

    def __str__(self) -> str:
        if self.service and self.operation:
            return f"{self.service}.{self.operation}: {self.message}"
        return self.message
