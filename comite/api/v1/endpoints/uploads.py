"""
Pre-signed upload URL endpoint
"""
import json
import logging
from fastapi import APIRouter, Depends, Request

from ....core.exceptions import MethodNotAllowedException
from ....core.responses import ErrorResponse
from ....services.upload_signing_service import UploadSigningService
from ..dependencies import get_upload_signing_service

logger = logging.getLogger(__name__)

router = APIRouter()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    return request.client.host if request.client else "unknown"


async def read_json_body(request: Request):
    body = await request.body()
    if not body:
        return {}
    try:
        return json.loads(body)
    except ValueError:
        return {}


@router.post(
    "",
    responses={code: {"model": ErrorResponse} for code in (400, 401, 403, 429, 500)},
)
async def sign_upload(
    request: Request,
    service: UploadSigningService = Depends(get_upload_signing_service),
):
    """Issue a short-lived PUT URL for a direct upload to object storage"""
    signed = service.handle(
        client_ip(request),
        request.headers.get("x-comite-role"),
        request.headers.get("x-comite-secret"),
        await read_json_body(request),
    )
    return signed.model_dump(by_alias=True)


# Other methods answer 405 without touching the signing service or its settings
@router.api_route(
    "",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def sign_upload_method_not_allowed():
    raise MethodNotAllowedException("Method Not Allowed")
