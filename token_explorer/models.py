from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import List, Optional


class CompletionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str = Field(..., min_length=1)
    model: str = "gpt-3.5-turbo"
    # strict: no bool or numeric-string coercion, int is still accepted for temperature
    temperature: float = Field(0.7, ge=0.0, le=2.0, strict=True)
    maxTokens: int = Field(150, ge=1, le=4096, strict=True)
    credential: Optional[str] = Field(None, validation_alias=AliasChoices("credential", "apiKey"))


class AlternativeToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    probability: float


class TokenProbability(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    probability: float
    alternatives: List[AlternativeToken] = []


class Usage(BaseModel):
    model_config = ConfigDict(frozen=True)

    promptTokens: int = 0
    completionTokens: int = 0
    totalTokens: int = 0


class CompletionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    tokenProbabilities: List[TokenProbability]
    usage: Usage
    responseTime: float
    model: str


# Access control
class PasskeyRequest(BaseModel):
    passkey: str


class PasskeyResponse(BaseModel):
    success: bool
    message: Optional[str] = None
