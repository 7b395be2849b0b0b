import mimetypes

DEFAULT_CONTENT_TYPE = "application/octet-stream"

INFER_MIME_TYPE: dict[str, str] = {
    # Images
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    # Videos
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "webm": "video/webm",
    # Audio
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "m4a": "audio/m4a",
    # Text and documents
    "txt": "text/plain",
    "html": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "pdf": "application/pdf",
}


# Compressed files are served as the compressed bytes, not as what they decompress to
ENCODING_MIME_TYPE: dict[str, str] = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "compress": "application/x-compress",
    "br": "application/x-brotli",
}


def content_type(id: str | int) -> str:
    """Guess the content type of a file from the extension of its id"""
    name = str(id)
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    if ext in INFER_MIME_TYPE:
        return INFER_MIME_TYPE[ext]
    guess, encoding = mimetypes.guess_type(name, strict=False)
    if encoding is not None:
        return ENCODING_MIME_TYPE.get(encoding, DEFAULT_CONTENT_TYPE)
    return guess or DEFAULT_CONTENT_TYPE
