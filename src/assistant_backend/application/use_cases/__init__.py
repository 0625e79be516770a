"""Use-case layer — business logic decoupled from the HTTP transport."""

from assistant_backend.application.use_cases.chat import ChatResult, ChatUseCase

__all__ = ["ChatResult", "ChatUseCase"]
