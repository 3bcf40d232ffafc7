"""Static facts about every supported backend and per-request config resolution.

``resolve`` takes the environment as an explicit mapping, so the same call
gives the same answer in tests and in the server without touching
``os.environ``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlparse

from askstream.providers.base import (
    ConnectionConfig,
    Overrides,
    ProviderConfigError,
    UnrecognizedProviderError,
)

DEFAULT_MAX_TOKENS = 1024

# generic fallbacks that apply to whichever provider is active
GENERIC_KEY_VAR = "ASK_API_KEY"
GENERIC_URL_VAR = "ASK_API_URL"
GENERIC_MODEL_VAR = "ASK_MODEL"
GENERIC_MAX_TOKENS_VAR = "ASK_MAX_TOKENS"


class ProviderIdentity(str, Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GEMINI = "gemini"
    OLLAMA = "ollama"
    PERPLEXITY = "perplexity"
    GROQ = "groq"
    MISTRAL = "mistral"
    COHERE = "cohere"
    TOGETHER = "together"
    CUSTOM = "custom"


class WireFamily(str, Enum):
    ANTHROPIC = "anthropic"  # single top-level system string, x-api-key header
    OPENAI = "openai"  # system-role message, bearer token
    GEMINI = "gemini"  # structured contents, key in the URL
    OLLAMA = "ollama"  # NDJSON with a done flag, no auth


@dataclass(frozen=True)
class ProviderDescriptor:
    identity: ProviderIdentity
    name: str
    api_url: str
    model: str
    env_var: str
    family: WireFamily

    @property
    def requires_credential(self) -> bool:
        return bool(self.env_var)


_DESCRIPTORS: Dict[ProviderIdentity, ProviderDescriptor] = {
    d.identity: d
    for d in (
        ProviderDescriptor(
            ProviderIdentity.ANTHROPIC, "Anthropic",
            "https://api.anthropic.com/v1/messages",
            "claude-sonnet-4-20250514", "ANTHROPIC_API_KEY", WireFamily.ANTHROPIC,
        ),
        ProviderDescriptor(
            ProviderIdentity.OPENAI, "OpenAI",
            "https://api.openai.com/v1/chat/completions",
            "gpt-4o", "OPENAI_API_KEY", WireFamily.OPENAI,
        ),
        ProviderDescriptor(
            ProviderIdentity.GEMINI, "Google Gemini",
            "https://generativelanguage.googleapis.com/v1beta/models",
            "gemini-1.5-flash", "GEMINI_API_KEY", WireFamily.GEMINI,
        ),
        ProviderDescriptor(
            ProviderIdentity.OLLAMA, "Ollama",
            "http://localhost:11434/api/chat",
            "llama3.2", "", WireFamily.OLLAMA,
        ),
        ProviderDescriptor(
            ProviderIdentity.PERPLEXITY, "Perplexity",
            "https://api.perplexity.ai/chat/completions",
            "llama-3.1-sonar-small-128k-online", "PERPLEXITY_API_KEY", WireFamily.OPENAI,
        ),
        ProviderDescriptor(
            ProviderIdentity.GROQ, "Groq",
            "https://api.groq.com/openai/v1/chat/completions",
            "llama-3.3-70b-versatile", "GROQ_API_KEY", WireFamily.OPENAI,
        ),
        ProviderDescriptor(
            ProviderIdentity.MISTRAL, "Mistral",
            "https://api.mistral.ai/v1/chat/completions",
            "mistral-small-latest", "MISTRAL_API_KEY", WireFamily.OPENAI,
        ),
        ProviderDescriptor(
            ProviderIdentity.COHERE, "Cohere",
            "https://api.cohere.ai/v1/chat",
            "command-r-plus", "COHERE_API_KEY", WireFamily.OPENAI,
        ),
        ProviderDescriptor(
            ProviderIdentity.TOGETHER, "Together AI",
            "https://api.together.xyz/v1/chat/completions",
            "meta-llama/Llama-3.3-70B-Instruct-Turbo", "TOGETHER_API_KEY", WireFamily.OPENAI,
        ),
        ProviderDescriptor(
            ProviderIdentity.CUSTOM, "Custom (OpenAI-compatible)",
            "", "gpt-4o", GENERIC_KEY_VAR, WireFamily.OPENAI,
        ),
    )
}

_ALIASES = {"google": ProviderIdentity.GEMINI}

_KNOWN_HOSTS = (
    "api.anthropic.com",
    "api.openai.com",
    "generativelanguage.googleapis.com",
    "localhost",
    "127.0.0.1",
    "api.perplexity.ai",
    "api.groq.com",
    "api.mistral.ai",
    "api.cohere.ai",
    "api.together.xyz",
)


def known_identities() -> List[str]:
    """Names of the built-in providers, in display order (``custom`` excluded)."""
    return [i.value for i in ProviderIdentity if i is not ProviderIdentity.CUSTOM]


def parse_identity(value: str) -> ProviderIdentity:
    key = (value or "").strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return ProviderIdentity(key)
    except ValueError:
        raise UnrecognizedProviderError(value, known_identities() + ["custom"]) from None


def describe(identity: ProviderIdentity) -> ProviderDescriptor:
    return _DESCRIPTORS[ProviderIdentity(identity)]


def is_known_provider_url(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return any(host == h or host.endswith("." + h) for h in _KNOWN_HOSTS)


def _first(*values: Optional[str]) -> str:
    for v in values:
        if v:
            return v
    return ""


def _parse_max_tokens(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ProviderConfigError(f"Invalid max_tokens value: {raw}") from None
    if value <= 0:
        raise ProviderConfigError(f"Invalid max_tokens value: {raw}")
    return value


def resolve(
    identity: ProviderIdentity,
    overrides: Optional[Overrides] = None,
    environment: Optional[Mapping[str, str]] = None,
) -> ConnectionConfig:
    """Merge explicit overrides, environment and descriptor defaults.

    Precedence per field is explicit value, then environment, then default.
    The credential checks the provider's own variable before ``ASK_API_KEY``.
    A missing credential is *not* an error here; the dispatcher decides that,
    since some providers need none.
    """
    desc = describe(identity)
    ov = overrides or Overrides()
    env = environment or {}

    provider_key = env.get(desc.env_var) if desc.env_var else None
    api_key = _first(ov.api_key, provider_key, env.get(GENERIC_KEY_VAR))
    api_url = _first(ov.api_url, env.get(GENERIC_URL_VAR), desc.api_url)
    model = _first(ov.model, env.get(GENERIC_MODEL_VAR), desc.model)

    if ov.max_tokens is not None:
        max_tokens = _parse_max_tokens(str(ov.max_tokens))
    elif env.get(GENERIC_MAX_TOKENS_VAR):
        max_tokens = _parse_max_tokens(env[GENERIC_MAX_TOKENS_VAR])
    else:
        max_tokens = DEFAULT_MAX_TOKENS

    if not api_url:
        raise ProviderConfigError(
            f"Provider '{desc.identity.value}' has no default endpoint; set {GENERIC_URL_VAR} or api_url."
        )

    return ConnectionConfig(api_key=api_key, api_url=api_url, model=model, max_tokens=max_tokens)
