import logging
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse
from askstream.schemas.ask import AskRequest
from askstream.providers.base import (
    ApiError,
    MissingCredentialError,
    ProviderConfigError,
    ProviderError,
    UnrecognizedProviderError,
)
from askstream.providers.registry import is_known_provider_url
from askstream.services.ask_service import prepare_and_stream

router = APIRouter(tags=["ask"])
logger = logging.getLogger(__name__)

@router.post("/ask")
async def ask(req: AskRequest, request: Request):
    try:
        identity, conn, gen = prepare_and_stream(
            message=req.message,
            provider=req.provider,
            model=req.model,
            api_url=req.api_url,
            max_tokens=req.max_tokens,
        )
    except (UnrecognizedProviderError, MissingCredentialError, ProviderConfigError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    # the body never carries a key, so any resolved key is the server's own;
    # it must not be sent to an endpoint the caller picked
    if req.api_url and conn.api_key and not is_known_provider_url(req.api_url):
        await gen.aclose()
        raise HTTPException(status_code=400, detail=f"api_url {req.api_url} is not a recognized provider endpoint")

    # pull the first fragment here so status and connection failures become
    # HTTP errors instead of a 200 with an empty body
    first = None
    try:
        first = await anext(gen)
    except StopAsyncIteration:
        pass
    except ApiError as e:
        raise HTTPException(status_code=502, detail={"status": e.status, "body": e.body})
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))

    async def streamer():
        try:
            if first is not None:
                yield first.encode("utf-8")
            async for chunk in gen:
                if await request.is_disconnected():
                    logger.info("client disconnected, stopping stream")
                    break
                yield chunk.encode("utf-8")
        except Exception as e:
            logger.exception("streaming error occurred: %s", e)
        finally:
            await gen.aclose()

    headers = {"X-Provider": identity.value, "X-Model": conn.model}
    return StreamingResponse(streamer(), media_type="text/plain; charset=utf-8", headers=headers)
