from blobserve.__main__ import main
from tests.tools import blobserve_settings


def test_url(capsys):
    main(["url", "42"])
    main(["url", "image.png", "-s", "users", "-s", "7"])
    assert capsys.readouterr().out.splitlines() == ["/files/42", "/files/users/7/image.png"]


def test_put(tmp_path, capsys):
    file = tmp_path / "upload.bin"
    file.write_bytes(b"some bytes")
    with blobserve_settings(db_path=tmp_path / "cli.db"):
        main(["put", "42", str(file), "-s", "a"])
    assert capsys.readouterr().out.strip() == "/files/a/42"
    assert (tmp_path / "cli.db").exists()


def test_create_env(tmp_path):
    output = tmp_path / ".env"
    main(["create-env", "-o", str(output)])
    env = output.read_text()
    assert "blobserve_cache_policy=etag" in env
    assert "blobserve_max_sublevel_depth=16" in env
    assert "# - production:" in env
    assert "blobserve_env_file" not in env
