from fastapi import APIRouter
from askstream.providers.registry import describe, known_identities, parse_identity
from askstream.schemas.ask import ProviderInfo, ProvidersResponse

router = APIRouter(tags=["providers"])

@router.get("/providers", response_model=ProvidersResponse)
def list_providers() -> ProvidersResponse:
    infos = []
    for name in known_identities():
        d = describe(parse_identity(name))
        infos.append(
            ProviderInfo(
                name=name,
                display_name=d.name,
                family=d.family.value,
                default_model=d.model,
                requires_api_key=d.requires_credential,
            )
        )
    return ProvidersResponse(providers=infos)
