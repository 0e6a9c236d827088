"""
Base Service Interface

Services take a pydantic contract in and hand a pydantic contract out.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for scalpbot services.

    execute() runs validate_input() first in every implementation;
    the default validation is a no-op since pydantic already checked types.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name for logging and error prefixes."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Run the service.

        Raises:
            ServiceError: If the input cannot be processed
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    async def validate_input(self, input_data: InputT) -> InputT:
        return input_data


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, service_name: str, message: str, details: dict = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class ValidationError(ServiceError):
    """Input validation error."""
    pass


class ExternalAPIError(ServiceError):
    """LLM provider call failed or no provider is configured."""
    pass


class LLMResponseError(ServiceError):
    """LLM replied, but the reply holds no usable signal."""
    pass
