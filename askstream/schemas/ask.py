from pydantic import BaseModel, Field
from typing import List, Optional

class AskRequest(BaseModel):
    message: str = Field(min_length=1, max_length=4000)
    provider: Optional[str] = None
    model: Optional[str] = None
    api_url: Optional[str] = None
    max_tokens: Optional[int] = Field(default=None, gt=0)

class ProviderInfo(BaseModel):
    name: str
    display_name: str
    family: str
    default_model: str
    requires_api_key: bool

class ProvidersResponse(BaseModel):
    providers: List[ProviderInfo]
