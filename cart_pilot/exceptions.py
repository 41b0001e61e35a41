class LLMException(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f'Error {status_code}: {message}')


class AgentConfigurationError(ValueError):
    """Raised when the agent is wired with missing or inconsistent collaborators."""


class InvalidStatusTransitionError(RuntimeError):
    """Raised when a task status would move backwards out of a terminal state."""


class ExecutionContextNotFoundError(LookupError):
    """Raised when no live page is registered under the requested context id."""


class StaleExecutionContextError(RuntimeError):
    """Raised when the page's JavaScript context was destroyed or lost the page helper."""
