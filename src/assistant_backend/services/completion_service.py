"""Single-request access to the text-completion service.

Every call is exactly one model request: the orchestrator decides what
happens between requests, so no agent loop runs here.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger
from pydantic_ai.direct import model_request
from pydantic_ai.messages import ModelMessage, ModelResponse, ToolCallPart
from pydantic_ai.models import Model, ModelRequestParameters
from pydantic_ai.settings import ModelSettings
from pydantic_ai.tools import ToolDefinition


class CompletionService:
    """Sends one conversation to the chat model and returns its reply.

    Parameters
    ----------
    model:
        Any pydantic-ai ``Model`` (``OpenAIChatModel`` in production,
        ``FunctionModel`` in tests).
    max_tokens:
        Upper bound on generated tokens per request.
    instrument:
        Passed through to pydantic-ai; ``True`` emits OpenTelemetry spans.
    """

    def __init__(self, model: Model, *, max_tokens: int = 2048, instrument: bool = False) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self.instrument = instrument

    async def request(
        self,
        messages: Sequence[ModelMessage],
        tools: Sequence[ToolDefinition] | None = None,
    ) -> ModelResponse:
        """Send ``messages`` and return the model's reply.

        When ``tools`` is given the model may answer with tool calls (automatic
        tool choice); without it the model must answer in text.
        """
        params = ModelRequestParameters(
            function_tools=list(tools or []),
            allow_text_output=True,
        )
        response = await model_request(
            self.model,
            list(messages),
            model_settings=ModelSettings(max_tokens=self.max_tokens),
            model_request_parameters=params,
            instrument=self.instrument,
        )
        tool_calls = sum(1 for part in response.parts if isinstance(part, ToolCallPart))
        logger.debug(
            "Completion | messages={} tools={} tool_calls={}",
            len(messages),
            len(params.function_tools),
            tool_calls,
        )
        return response
