"""
Music DB API - Greeting & Route Listing
=========================================

What:  GET / returns a plain-text greeting; GET /endpoints lists every API
       route with its methods, so clients can discover the filter endpoints.
How:   The listing is read from the generated OpenAPI document, which covers
       routes mounted through include_router however the framework stores them.
"""

from typing import List

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import PlainTextResponse

from musicdb.schemas.track import EndpointResponse

router = APIRouter(tags=["Root"])

GREETING = "Hello! Music DB here"

# OpenAPI path item keys that name HTTP operations
HTTP_METHODS = ("get", "put", "post", "delete", "patch")


def collect_endpoints(app: FastAPI) -> List[EndpointResponse]:
    """
    List the application's API routes in registration order.

    Documentation routes (/docs, /openapi.json) are not part of the schema
    and are left out, as are the implicit HEAD/OPTIONS methods.
    """
    endpoints = []
    for path, operations in app.openapi().get("paths", {}).items():
        methods = sorted(method.upper() for method in operations if method in HTTP_METHODS)
        endpoints.append(EndpointResponse(path=path, methods=methods))
    return endpoints


@router.get("/", response_class=PlainTextResponse, summary="Greeting")
async def greeting() -> str:
    return GREETING


@router.get(
    "/endpoints",
    response_model=List[EndpointResponse],
    summary="List registered routes",
)
async def list_endpoints(request: Request) -> List[EndpointResponse]:
    return collect_endpoints(request.app)
