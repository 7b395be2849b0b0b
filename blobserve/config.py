"""
blobserve Configuration

We read configuration from 2 sources, in order of precedence (higher is more priority)
- Environment variables
- A .env file, either in the current working directory or in a location specified
  by the BLOBSERVE_ENV_FILE environment variable
"""

import functools
from enum import Enum
from pathlib import Path
from typing import Annotated

from class_doc import extract_docs_from_cls_obj
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "blobserve_"


class Environment(str, Enum):
    #: generic error bodies, no diagnostic detail is sent to clients
    production = "production"

    #: error bodies include the error message
    development = "development"

    #: as development, used by the unit tests
    test = "test"


class CachePolicy(str, Enum):
    #: only check that the file exists, always send the full body
    exists = "exists"

    #: send the version of the file as ETag and answer 304 if the client has it
    etag = "etag"


for _cls in (Environment, CachePolicy):
    for field, doc in extract_docs_from_cls_obj(_cls).items():
        _cls[field].__doc__ = "\n".join(doc)


class Settings(BaseSettings):
    env_file: Annotated[
        Path,
        Field(
            description="Location of a .env file (if used) relative to working directory",
        ),
    ] = Path(".env")

    db_path: Annotated[
        Path,
        Field(
            description="Location of the sqlite database holding the files",
        ),
    ] = Path("blobserve.db")

    env: Annotated[
        Environment,
        Field(description="Server mode. Only in production are error details hidden from clients"),
    ] = Environment.development

    cache_policy: Annotated[
        CachePolicy,
        Field(description="How to validate browser caches when serving files"),
    ] = CachePolicy.etag

    max_sublevel_depth: Annotated[
        int,
        Field(
            ge=0,
            description="Maximum number of nested sublevels that can be addressed in a file url",
        ),
    ] = 16

    chunk_size: Annotated[
        int,
        Field(
            gt=0,
            description="Size in bytes of the chunks files are stored and streamed in",
        ),
    ] = 64 * 1024

    @property
    def production(self) -> bool:
        return self.env == Environment.production

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)


@functools.lru_cache()
def get_settings() -> Settings:
    # Read the env_file location first, so the .env file can be loaded before the real settings
    temp = Settings()
    load_dotenv(temp.env_file, override=False)
    return Settings()


if __name__ == "__main__":
    # Echo the settings
    for k, v in get_settings().model_dump().items():
        if isinstance(v, Enum):
            v = v.value
        print(f"{ENV_PREFIX.upper()}{k.upper()}={v}")
