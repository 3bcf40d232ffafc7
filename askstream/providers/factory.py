# the only place a wire family is picked from a provider identity;
# everything downstream of get_adapter() is family-generic

import logging
from contextlib import aclosing
from typing import AsyncIterator, Callable

from askstream.providers import anthropic, gemini, ollama, openai
from askstream.providers.base import (
    Completed,
    ConnectionConfig,
    Failed,
    MissingCredentialError,
    ProviderTransportError,
    StreamEvent,
    TextFragment,
    TextSink,
)
from askstream.providers.registry import (
    ProviderIdentity,
    WireFamily,
    describe,
    is_known_provider_url,
)

logger = logging.getLogger(__name__)

StreamFn = Callable[[ConnectionConfig, str], AsyncIterator[StreamEvent]]


def get_adapter(family: WireFamily) -> StreamFn:
    if family is WireFamily.ANTHROPIC:
        return anthropic.stream
    if family is WireFamily.OPENAI:
        return openai.stream
    if family is WireFamily.GEMINI:
        return gemini.stream
    if family is WireFamily.OLLAMA:
        return ollama.stream
    raise ValueError(f"Unhandled wire family: {family!r}")


def check_credential(identity: ProviderIdentity, config: ConnectionConfig) -> None:
    desc = describe(identity)
    if desc.requires_credential and not config.api_key:
        raise MissingCredentialError(desc.identity.value, desc.env_var)


async def stream_query(
    identity: ProviderIdentity,
    config: ConnectionConfig,
    query: str,
) -> AsyncIterator[str]:
    """Yield text fragments for ``query`` from the provider behind ``identity``.

    Credential problems are raised before any network I/O. A ``Failed``
    event from the decoder is raised as :class:`ProviderTransportError`.
    """
    check_credential(identity, config)
    desc = describe(identity)
    if config.api_key and not is_known_provider_url(config.api_url):
        logger.warning("sending %s credential to unrecognized host %s", desc.name, config.api_url)

    logger.info("streaming from %s (model=%s)", desc.identity.value, config.model)
    async with aclosing(get_adapter(desc.family)(config, query)) as events:
        async for event in events:
            if isinstance(event, TextFragment):
                yield event.text
            elif isinstance(event, Failed):
                raise ProviderTransportError(event.reason)
            elif isinstance(event, Completed):
                return


async def send_query(
    identity: ProviderIdentity,
    config: ConnectionConfig,
    query: str,
    sink: TextSink,
) -> None:
    # flush after every fragment so output shows up as it is generated
    async for text in stream_query(identity, config, query):
        sink.write(text)
        sink.flush()
    sink.write("\n")
    sink.flush()
