from blobserve.mime import DEFAULT_CONTENT_TYPE, content_type


def test_content_type():
    assert content_type("image.png") == "image/png"
    assert content_type("photo.JPG") == "image/jpeg"
    assert content_type("notes.txt") == "text/plain"


def test_content_type_default():
    assert content_type("42") == DEFAULT_CONTENT_TYPE
    assert content_type(42) == DEFAULT_CONTENT_TYPE
    assert content_type("file.doesnotexist") == DEFAULT_CONTENT_TYPE


def test_content_type_compressed():
    # Served as the compressed bytes, so the type is that of the compression
    assert content_type("backup.tar.gz") == "application/gzip"
    assert content_type("data.json.bz2") == "application/x-bzip2"
    assert content_type("notes.txt.xz") == "application/x-xz"
