"""
File urls

Files are served at /files/(:sublevel/)*:id
"""

from urllib.parse import quote

from pydantic import BaseModel, Field

from blobserve.sublevel import Sublevel

ROUTE_PREFIX = "files"


class FileQuery(BaseModel):
    id: str = Field(description="Id of the file, the last segment of the url")
    sublevels: list[str] = Field(default_factory=list, description="Sublevel names, outer to inner")


def parse_url(url: str) -> FileQuery | None:
    """
    Parse a decoded url path (without query string) into the file id and sublevels,
    or None if this is not a file url
    """
    segs = url.split("/")
    if len(segs) < 3 or segs[1] != ROUTE_PREFIX or not segs[2] or not segs[-1]:
        return None
    return FileQuery(id=segs[-1], sublevels=segs[2:-1])


def build_url(level: Sublevel, id: str | int) -> str:
    """
    Get the url of file id in the given sublevel
    """
    names = []
    while level.parent is not None and level.prefix is not None:
        names.append(level.prefix)
        level = level.parent
    segments = [ROUTE_PREFIX, *reversed(names), str(id)]
    return "/" + "/".join(quote(seg, safe="") for seg in segments)
