# shared provider contract: error kinds, per-request config, outbound envelope,
# decoded stream events and the output sink every adapter writes through

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Sequence, Union


class ProviderError(Exception):
    pass


class MissingCredentialError(ProviderError):
    def __init__(self, provider: str, env_var: str) -> None:
        self.provider = provider
        self.env_var = env_var
        super().__init__(
            f"Provider '{provider}' requires an API key. "
            f"Set {env_var} or pass api_key explicitly."
        )


class UnrecognizedProviderError(ProviderError):
    def __init__(self, value: str, valid: Sequence[str]) -> None:
        self.value = value
        self.valid = list(valid)
        super().__init__(f"Unknown provider: {value}. Available: {', '.join(self.valid)}")


class ProviderConfigError(ProviderError):
    pass


class UnreachableBackendError(ProviderError):
    def __init__(self, endpoint: str) -> None:
        self.endpoint = endpoint
        super().__init__(
            f"Could not connect to Ollama at {endpoint}. Is Ollama running? "
            "Start it with: ollama serve"
        )


class ModelNotAvailableError(ProviderError):
    def __init__(self, model: str) -> None:
        self.model = model
        super().__init__(
            f"Model '{model}' not found in Ollama. Pull it with: ollama pull {model}"
        )


class ApiError(ProviderError):
    # status and body are kept verbatim so callers can show provider diagnostics
    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"API error ({status}): {body}")


class ProviderTransportError(ProviderError):
    pass


@dataclass(frozen=True)
class ConnectionConfig:
    api_key: str
    api_url: str
    model: str
    max_tokens: int = 1024


@dataclass(frozen=True)
class RequestEnvelope:
    url: str
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)
    method: str = "POST"


@dataclass(frozen=True)
class TextFragment:
    text: str


@dataclass(frozen=True)
class Completed:
    pass


@dataclass(frozen=True)
class Failed:
    reason: str


StreamEvent = Union[TextFragment, Completed, Failed]


class TextSink(Protocol):
    def write(self, text: str) -> Any: ...

    def flush(self) -> Any: ...


@dataclass(frozen=True)
class Overrides:
    """Explicit per-request values; ``None`` means "not set by the caller"."""

    api_key: Optional[str] = None
    api_url: Optional[str] = None
    model: Optional[str] = None
    max_tokens: Optional[int] = None
