import os
from typing import AsyncIterator, Mapping, Optional, Tuple
from askstream.core import config
from askstream.providers.base import ConnectionConfig, Overrides
from askstream.providers.factory import check_credential, stream_query
from askstream.providers.registry import ProviderIdentity, parse_identity, resolve


def prepare(
    *,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    api_url: Optional[str] = None,
    api_key: Optional[str] = None,
    max_tokens: Optional[int] = None,
    environment: Optional[Mapping[str, str]] = None,
) -> Tuple[ProviderIdentity, ConnectionConfig]:
    # every check that needs no network happens here, before a request is sent
    identity = parse_identity(provider or config.PROVIDER)
    overrides = Overrides(api_key=api_key, api_url=api_url, model=model, max_tokens=max_tokens)
    env = dict(os.environ) if environment is None else environment
    conn = resolve(identity, overrides, env)
    check_credential(identity, conn)
    return identity, conn


def prepare_and_stream(
    *,
    message: str,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    api_url: Optional[str] = None,
    max_tokens: Optional[int] = None,
    environment: Optional[Mapping[str, str]] = None,
) -> Tuple[ProviderIdentity, ConnectionConfig, AsyncIterator[str]]:
    identity, conn = prepare(
        provider=provider,
        model=model,
        api_url=api_url,
        max_tokens=max_tokens,
        environment=environment,
    )
    return identity, conn, stream_query(identity, conn, message)
