"""
blobserve: serve files stored in nested sublevels over HTTP
"""

import argparse
import asyncio
import inspect
import logging
import os
from enum import Enum
from pathlib import Path

import uvicorn
from pydantic.fields import FieldInfo
from uvicorn.config import LOGGING_CONFIG

from blobserve.config import ENV_PREFIX, get_settings
from blobserve.db import blob_database
from blobserve.gateway import Gateway
from blobserve.sublevel import Sublevel, resolve_sublevels


def run(args):
    settings = get_settings()
    logging.info(f"Starting server at port {args.port}, debug={not args.nodebug}, env={settings.env.value}")
    logging.info(
        "To change server config, create an .env file and/or set environment parameters,\n"
        f"{' ' * 26}see blobserve/config.py for more information.\n"
        f"{' ' * 26}You can also run `python -m blobserve create-env` to create a documented .env file\n"
    )
    log_config = "logging.yml" if Path("logging.yml").exists() else LOGGING_CONFIG
    uvicorn.run("blobserve.api:app", host="0.0.0.0", reload=not args.nodebug, port=int(args.port), log_config=log_config)


def _gateway(args) -> Gateway:
    return Gateway(resolve_sublevels(Sublevel(), args.sublevel or []))


async def put_file(args) -> None:
    data = Path(args.file).read_bytes()
    async with blob_database(get_settings().db_path):
        gateway = _gateway(args)
        version = await gateway.store(args.id, data)
        logging.info(f"Stored {len(data)} bytes as {args.id!r}, version {version}")
        print(gateway.url(args.id))


def print_url(args) -> None:
    print(_gateway(args).url(args.id))


def _isenum(fieldinfo: FieldInfo) -> bool:
    try:
        return issubclass(fieldinfo.annotation, Enum) if fieldinfo.annotation is not None else False
    except TypeError:
        return False


def create_env(args):
    settings = get_settings()
    path = Path(args.output) if args.output else settings.env_file
    with path.open("w") as f:
        for fieldname, fieldinfo in type(settings).model_fields.items():
            if fieldname == "env_file":
                continue
            value = getattr(settings, fieldname)
            if isinstance(value, Enum):
                value = value.value
            if doc := fieldinfo.description:
                f.write(f"# {doc}\n")
            if _isenum(fieldinfo) and fieldinfo.annotation:
                f.write("# Valid options:\n")
                for option in fieldinfo.annotation:
                    doc = (option.__doc__ or "").replace("\n", " ")
                    f.write(f"# - {option.name}: {doc}\n")
            f.write(f"{ENV_PREFIX}{fieldname}={value}\n\n")
    os.chmod(path, 0o600)
    print(f"*** Written {path} ***")


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__, prog="python -m blobserve")

    subparsers = parser.add_subparsers(dest="action", title="action", help="Action to perform:", required=True)
    p = subparsers.add_parser("run", help="Run the file server")
    p.add_argument(
        "--no-debug",
        action="store_true",
        dest="nodebug",
        help="Disable debug mode (no auto reload)",
    )
    p.add_argument("-p", "--port", help="Port", default=5000)
    p.set_defaults(func=run)

    p = subparsers.add_parser("put", help="Store a file and print its url")
    p.add_argument("id", help="The id to store the file under")
    p.add_argument("file", help="The file to store")
    p.add_argument("-s", "--sublevel", action="append", help="Sublevel to store the file in (repeat for nesting)")
    p.set_defaults(func=put_file)

    p = subparsers.add_parser("url", help="Print the url of a stored file")
    p.add_argument("id", help="The id of the file")
    p.add_argument("-s", "--sublevel", action="append", help="Sublevel of the file (repeat for nesting)")
    p.set_defaults(func=print_url)

    p = subparsers.add_parser("create-env", help="Create a .env file documenting all settings")
    p.add_argument("-o", "--output", help="File to write (default: the env_file setting)")
    p.set_defaults(func=create_env)

    args = parser.parse_args(argv)

    logging.basicConfig(format="[%(levelname)-7s:%(name)-15s] %(message)s", level=logging.INFO)
    logging.getLogger("peewee").setLevel(logging.WARNING)

    if inspect.iscoroutinefunction(args.func):
        asyncio.run(args.func(args))
    else:
        args.func(args)


if __name__ == "__main__":
    main()
