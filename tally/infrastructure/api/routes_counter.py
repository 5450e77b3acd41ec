"""Counter endpoints — read and bump via GET, bump via POST."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request

from tally.application.use_cases.counter_service import CounterService
from tally.config import settings
from tally.domain.errors import CounterError, InvalidField, MalformedPayload
from tally.domain.value_objects.enums import CounterAction, CounterField
from tally.infrastructure.api.dependencies import get_counter_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/counter", tags=["counter"])

GET_FIELD_ERROR = "Invalid or missing field parameter. Must be: likes, dislikes, or infos"
POST_FIELD_ERROR = "Invalid or missing field. Must be: likes, dislikes, or infos"
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


@router.get("")
async def handle_get(
    request: Request,
    service: CounterService = Depends(get_counter_service),
):
    """Read counters (``action=get``, the default) or bump one (``action=bump``).

    Bumping through GET keeps browser callers clear of CORS preflight.
    """
    params = request.query_params
    slug = params.get("slug") or settings.default_slug

    try:
        action = CounterAction.parse(params.get("action"))
        if action is CounterAction.GET:
            return await service.read_counts(slug)

        try:
            field = CounterField.parse(params.get("field"))
        except InvalidField:
            return {"error": GET_FIELD_ERROR}
        return await service.bump(slug, field)

    except CounterError as e:
        return {"error": str(e)}
    except Exception as e:
        logger.exception("Error in GET /counter")
        return {"error": str(e)}


@router.post("")
async def handle_post(
    request: Request,
    service: CounterService = Depends(get_counter_service),
):
    """Bump a counter from a JSON body ``{"slug": ..., "field": ...}``.

    Non-JSON bodies fall back to form fields, then to the query string.
    """
    params = request.query_params
    try:
        try:
            payload = parse_payload(await request.body())
        except MalformedPayload as e:
            logger.debug("Falling back to form and query parameters: %s", e)
            payload = await _form_fields(request)

        slug = _as_str(payload.get("slug")) or params.get("slug") or settings.default_slug
        raw_field = _as_str(payload.get("field")) or params.get("field")

        try:
            field = CounterField.parse(raw_field)
        except InvalidField:
            return {"error": POST_FIELD_ERROR}
        return await service.bump(slug, field)

    except CounterError as e:
        return {"error": str(e)}
    except Exception as e:
        logger.exception("Error in POST /counter")
        return {"error": str(e)}


def parse_payload(body: bytes) -> dict:
    """Decode a POST body into a parameter dict.

    An empty body is an empty dict. Anything that is not a JSON object raises
    MalformedPayload.
    """
    if not body or not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedPayload(f"Body is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedPayload(f"Body is a JSON {type(payload).__name__}, not an object")
    return payload


async def _form_fields(request: Request) -> dict:
    """Fields of a form-encoded body; empty for any other content type."""
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith(FORM_CONTENT_TYPES):
        return {}
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def _as_str(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
