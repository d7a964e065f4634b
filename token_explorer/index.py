from fastapi.responses import JSONResponse
from fastapi import APIRouter, HTTPException, Request
import json
import secrets
import uuid
from functools import wraps

import httpx
from pydantic import ValidationError
from openai._exceptions import APIStatusError

from token_explorer.config import ConfigurationError, get_settings
from token_explorer.log_config import logger
from token_explorer.models import CompletionRequest, PasskeyRequest, PasskeyResponse
from token_explorer.upstream.completions import get_completion_with_probabilities

logger.info("Index module initiated.")

index = APIRouter()


class InvalidJSONBodyError(Exception):
    """Request body is not valid JSON."""


def _error_response(status_code: int, message: str, error_type: str, **details) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={
        "error": {
            "message": message,
            "type": error_type,
            "param": None,
            "code": status_code,
            **details
        }
    })


def handle_error(e, request_id):

    if isinstance(e, ValidationError):
        logger.warning(f"Validation error: {e.error_count()} field error(s)")
        return _error_response(400, "Invalid request data", "validation_error", errors=[
            {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
            for error in e.errors()
        ])

    elif isinstance(e, InvalidJSONBodyError):
        logger.warning(f"Invalid JSON body: {e}")
        return _error_response(400, "Request body must be valid JSON", "validation_error", errors=[
            {"loc": ["body"], "msg": str(e), "type": "json_invalid"}
        ])

    elif isinstance(e, HTTPException):
        logger.error(f"HTTP error: {e.status_code} {e.detail}")
        return _error_response(e.status_code, str(e.detail), "http_error")

    elif isinstance(e, ConfigurationError):
        logger.error(f"Configuration error: {e}")
        return _error_response(500, f"Server configuration error: {e}", "configuration_error")

    elif isinstance(e, APIStatusError):
        logger.error(f"OpenAI API error: {e.status_code} {e.message}")
        return _error_response(e.status_code, e.message or "Error from OpenAI API", type(e).__name__, details=e.body)

    elif isinstance(e, httpx.HTTPError):
        logger.error(f"Upstream unreachable: {type(e).__name__}: {e}")
        return _error_response(500, str(e) or "Upstream request failed", "upstream_unreachable")

    else:
        logger.exception(f"Unexpected error: {e}")
        return _error_response(500, f"An unexpected error occurred. {request_id=}", "unexpected_error")


def handle_request(func):
    @wraps(func)
    async def wrapper(request: Request, *args, **kwargs):
        request_id = str(uuid.uuid4())

        with logger.contextualize(request_id=request_id):
            logger.debug(f"{request.method} {request.url.path} from {request.client.host if request.client else '-'}")
            try:
                return await func(request, *args, **kwargs)
            except Exception as e:
                return handle_error(e, request_id)

    return wrapper


async def _read_json(request: Request):
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidJSONBodyError(str(e)) from e


@index.post("/completion")
@handle_request
async def completion(request: Request):
    body = await _read_json(request)
    completion_request = CompletionRequest.model_validate(body)

    result = await get_completion_with_probabilities(completion_request)
    return JSONResponse(content=result.model_dump())


@index.post("/verify-access")
@handle_request
async def verify_access(request: Request):
    correct_passkey = get_settings().explorer_passkey
    if not correct_passkey:
        raise ConfigurationError("No passkey configured")

    body = await _read_json(request)
    try:
        passkey_request = PasskeyRequest.model_validate(body)
    except ValidationError:
        # Missing or non-string passkey never matches
        passkey_request = None

    if passkey_request is not None and secrets.compare_digest(passkey_request.passkey.encode(), correct_passkey.encode()):
        logger.info("Passkey accepted")
        return PasskeyResponse(success=True).model_dump(exclude_none=True)

    logger.warning("Invalid passkey provided")
    return JSONResponse(status_code=401, content=PasskeyResponse(success=False, message="Invalid passkey").model_dump())


###########################################################
# Checkers
###########################################################

@index.get("/")
def root():
    return {"status": "Token Explorer is running, check .../docs for more info"}

@index.get("/health")
def health_check():
    return {"status": "ok"}

@index.get("/readyz")
def readiness_probe():
    return {"status": "ready"}

@index.get("/livez")
def liveness_probe():
    return {"status": "alive"}
