"""
Serve files stored in the database over HTTP.

URLs:

  /files/(:sublevel/)*:id

A Gateway is created for a (root) sublevel. It provides the HTTP handler, a way to store files,
and a way to get the url of a stored file.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable

from fastapi import Request, Response, status
from fastapi.responses import PlainTextResponse, StreamingResponse

from blobserve.blobstore import BlobReader, BlobStore, BlobWriter, Callback, FileId
from blobserve.config import CachePolicy, get_settings
from blobserve.db import StoreError
from blobserve.mime import content_type
from blobserve.sublevel import InvalidSublevel, Sublevel, resolve_sublevels
from blobserve.urls import build_url, parse_url

FAVICON_PATH = "/favicon.ico"

ErrorCallback = Callable[[Exception], Response]


@dataclass(frozen=True)
class RequestHandlers:
    """How a single request reports errors and missing files"""

    error: ErrorCallback
    not_found: Callable[[], Response]


def create_error(production: bool) -> ErrorCallback:
    def error(exc: Exception) -> Response:
        if production:
            logging.error(f"Error handling request: {exc!r}")
            return PlainTextResponse("Internal server error.", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
        logging.error("Error handling request", exc_info=exc)
        return PlainTextResponse(str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return error


def create_not_found(error: ErrorCallback | None) -> Callable[[], Response]:
    if error is not None:
        return lambda: error(Exception("File not found."))
    return lambda: PlainTextResponse("File not found.", status_code=status.HTTP_404_NOT_FOUND)


def _strip_etag(etag: str) -> str:
    etag = etag.strip()
    if etag.startswith("W/"):
        etag = etag[2:]
    return etag.strip('"')


class Gateway:
    def __init__(
        self,
        db: Sublevel,
        cache_policy: CachePolicy | None = None,
        production: bool | None = None,
        max_depth: int | None = None,
        error: ErrorCallback | None = None,
    ):
        settings = get_settings()
        self.db = db
        self.cache_policy = CachePolicy(cache_policy) if cache_policy is not None else settings.cache_policy
        self.production = production if production is not None else settings.production
        self.max_depth = max_depth if max_depth is not None else settings.max_sublevel_depth
        self.error = error

    def create_write_stream(self, id: FileId, callback: Callback | None = None) -> BlobWriter:
        """Store a file under id"""
        return BlobStore(self.db).create_write_stream(id, callback)

    def create_read_stream(self, id: FileId) -> BlobReader:
        """Get the contents of the file stored under id"""
        return BlobStore(self.db).create_read_stream(id)

    async def store(self, id: FileId, data: bytes, callback: Callback | None = None) -> int | None:
        """
        Store data under id. The callback, if given, is called exactly once with the error or None.
        """
        return await BlobStore(self.db).write(id, data, callback)

    def url(self, id: FileId) -> str:
        """Get the url of file id, respecting sublevels"""
        return build_url(self.db, id)

    def handlers(self, error: ErrorCallback | None = None) -> RequestHandlers:
        error = error or self.error
        return RequestHandlers(
            error=error or create_error(self.production),
            not_found=create_not_found(error),
        )

    async def handle(self, request: Request, error: ErrorCallback | None = None) -> Response:
        """
        HTTP handler for a GET request. If error is given, all errors (including not found) are passed to it.
        """
        handlers = self.handlers(error)
        path = request.scope["path"]

        if path == FAVICON_PATH:
            return Response(status_code=status.HTTP_200_OK)

        query = parse_url(path)
        if query is None:
            return handlers.not_found()
        logging.debug(f"query: {query.model_dump_json()}")

        try:
            level = resolve_sublevels(self.db, query.sublevels, max_depth=self.max_depth)
        except InvalidSublevel as e:
            logging.debug(f"Invalid sublevels in {path!r}: {e}")
            return handlers.not_found()
        store = BlobStore(level)

        if self.cache_policy == CachePolicy.exists:
            try:
                found = await store.exists(query.id)
            except StoreError as e:
                return handlers.error(e)
            if not found:
                return handlers.not_found()
            return StreamingResponse(
                stream(store.create_read_stream(query.id)),
                headers={"Content-Type": content_type(query.id)},
            )

        try:
            meta = await store.stat(query.id)
        except StoreError as e:
            return handlers.error(e)
        if meta is None:
            return handlers.not_found()

        etag = f'"{meta.version}"'
        headers = {"Content-Type": content_type(query.id), "ETag": etag}

        if_none_match = request.headers.get("if-none-match")
        if if_none_match is not None and _strip_etag(if_none_match) == str(meta.version):
            return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)

        headers["Content-Length"] = str(meta.size)
        return StreamingResponse(stream(store.create_read_stream(query.id, version=meta.version)), headers=headers)


async def stream(reader: BlobReader) -> AsyncIterator[bytes]:
    """
    Pipe the reader to the response. Headers have been sent by now, so errors can only be logged and re-raised.
    """
    try:
        async for chunk in reader:
            yield chunk
    except StoreError:
        logging.exception(f"Error streaming {reader.id!r} from {reader.store.level!r}")
        raise
    finally:
        await reader.aclose()
