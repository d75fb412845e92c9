"""Tool-calling conversation loop.

Provides the ChatOrchestrator class that drives one user message through the
model: request a reply, execute any tool calls it carries, append the
results, and request again until the model answers without tool calls.
"""

import asyncio
import enum
import json
import logging
from pathlib import Path
from typing import Any, Callable, Mapping

from stick_gpt.config import DEFAULT_SYSTEM_PROMPT
from stick_gpt.conversation import ConversationStore, ToolCallRequest, Turn
from stick_gpt.exceptions import ArgumentParseError, LoopLimitExceeded
from stick_gpt.llm.base import ModelClient, ModelReply
from stick_gpt.tools.arguments import parse_arguments
from stick_gpt.tools.invoker import ToolInvoker
from stick_gpt.tools.registry import Tool, ToolRegistry

logger = logging.getLogger(__name__)


class OrchestratorState(str, enum.Enum):
    """States the orchestrator moves through during send()."""

    AWAITING_USER_INPUT = "awaiting_user_input"
    REQUESTING_MODEL = "requesting_model"
    HANDLING_TOOL_CALLS = "handling_tool_calls"
    DONE = "done"


class ChatOrchestrator:
    """Runs the request / tool execution cycle for a single conversation.

    The orchestrator exclusively owns its ConversationStore. The system
    prompt is not stored in the conversation; it is prefixed to every model
    request. Tool failures of any kind are reported back to the model as
    ``{"error": ...}`` results and never abort the loop. Model failures
    propagate to the caller of send(), leaving the turns appended so far.

    Usage::

        orchestrator = ChatOrchestrator(OpenAIClient(api_key), registry)
        answer = await orchestrator.send("What time is it?")
    """

    def __init__(
        self,
        client: ModelClient,
        registry: ToolRegistry | None = None,
        *,
        model: str = "gpt-4o-mini",
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        temperature: float = 0.7,
        max_tokens: int | None = 2000,
        max_iterations: int | None = 50,
        parallel_tool_calls: bool = False,
        on_tool_call: Callable[[ToolCallRequest], None] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            client: Model backend
            registry: Tools available to the model (default: empty registry)
            model: Model identifier sent with each request
            system_prompt: Prompt prefixed to every request
            temperature: Sampling temperature
            max_tokens: Maximum output tokens per model request
            max_iterations: Maximum model requests per send(); None for no limit
            parallel_tool_calls: Run the handlers of one reply concurrently
            on_tool_call: Callback invoked before each tool call is executed
        """
        if max_iterations is not None and max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")

        self.client = client
        self.registry = registry if registry is not None else ToolRegistry()
        self.model = model
        self.system_prompt = system_prompt
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_iterations = max_iterations
        self.parallel_tool_calls = parallel_tool_calls
        self.on_tool_call = on_tool_call

        self._conversation = ConversationStore()
        self._invoker = ToolInvoker(self.registry)
        self._state = OrchestratorState.AWAITING_USER_INPUT
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> OrchestratorState:
        """Return the current orchestrator state."""
        return self._state

    def register_tool(self, tool: Tool | Mapping[str, Any]) -> Tool:
        """Register a tool the model may call."""
        return self.registry.register(tool)

    async def send(self, user_text: str) -> str:
        """Send a user message and run the loop until the model answers.

        Args:
            user_text: The user's message

        Returns:
            The model's final plain-text answer

        Raises:
            ModelRequestError: If a model request fails
            LoopLimitExceeded: If the model keeps requesting tools beyond
                max_iterations requests
        """
        async with self._lock:
            try:
                return await self._run(user_text)
            except BaseException:
                self._state = OrchestratorState.AWAITING_USER_INPUT
                raise

    def reset(self) -> None:
        """Clear the conversation history."""
        self._conversation.reset()
        self._state = OrchestratorState.AWAITING_USER_INPUT

    def get_history(self) -> tuple[Turn, ...]:
        """Return an immutable snapshot of the conversation."""
        return self._conversation.snapshot()

    def save_conversation(self, path: Path | str) -> None:
        """Persist the conversation to a JSON file."""
        self._conversation.persist(path)

    def load_conversation(self, path: Path | str) -> bool:
        """Replace the conversation with a saved one, if the file exists."""
        return self._conversation.restore(path)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def _run(self, user_text: str) -> str:
        self._conversation.append(Turn.user(user_text))
        iterations = 0

        while True:
            if self.max_iterations is not None and iterations >= self.max_iterations:
                logger.error(f"Tool loop hit the limit of {self.max_iterations} requests")
                raise LoopLimitExceeded(self.max_iterations)
            iterations += 1

            self._state = OrchestratorState.REQUESTING_MODEL
            reply = await self._request_model()

            if not reply.has_tool_calls:
                self._conversation.append(Turn.assistant(reply.content))
                self._state = OrchestratorState.DONE
                logger.info(f"send() finished after {iterations} model request(s)")
                return reply.content

            self._conversation.append(Turn.assistant(reply.content, reply.tool_calls))
            self._state = OrchestratorState.HANDLING_TOOL_CALLS
            await self._handle_tool_calls(reply.tool_calls)

    async def _request_model(self) -> ModelReply:
        turns = [Turn.system(self.system_prompt), *self._conversation.snapshot()]
        tools = self.registry.describe_all() or None

        logger.debug(
            f"Requesting {self.model} with {len(turns)} turns "
            f"and {len(tools or [])} tools"
        )
        return await self.client.complete(
            model=self.model,
            turns=turns,
            tools=tools,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

    async def _handle_tool_calls(self, calls: list[ToolCallRequest]) -> None:
        """Execute the calls of one reply and append a tool turn per call, in order."""
        if self.parallel_tool_calls:
            results = await asyncio.gather(*(self._execute(call) for call in calls))
        else:
            results = [await self._execute(call) for call in calls]

        for call, result in zip(calls, results):
            self._conversation.append(
                Turn.tool(call.id, self._serialize_result(result), name=call.name)
            )

    async def _execute(self, call: ToolCallRequest) -> Any:
        if self.on_tool_call is not None:
            try:
                self.on_tool_call(call)
            except Exception as e:
                logger.warning(f"on_tool_call callback failed for {call.name}: {e}")

        try:
            args = parse_arguments(call.arguments)
        except ArgumentParseError as e:
            logger.warning(f"Could not parse arguments for {call.name}: {e}")
            return {"error": str(e)}

        return await self._invoker.invoke(call.name, args)

    @staticmethod
    def _serialize_result(result: Any) -> str:
        return json.dumps(result, default=str, ensure_ascii=False)
