"""API endpoint serving the stored files."""

from fastapi import APIRouter, Request, Response

from blobserve.gateway import Gateway

app_files = APIRouter(tags=["files"])


def get_gateway(request: Request) -> Gateway:
    return request.app.state.gateway


@app_files.get("/{path:path}")
async def serve(request: Request, path: str) -> Response:
    """
    Get a stored file from /files/(:sublevel/)*:id. All other paths are not found.
    """
    return await get_gateway(request).handle(request)
