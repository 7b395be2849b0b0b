#!/usr/bin/env python

from setuptools import setup

setup(
    name="blobserve",
    version="0.1.0",
    description="Serve files stored in nested sublevels of a database over HTTP",
    packages=["blobserve", "blobserve.api"],
    include_package_data=True,
    zip_safe=False,
    keywords=["HTTP", "files", "blob"],
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    ],
    python_requires=">=3.10",
    install_requires=[
        "fastapi",
        "peewee",
        "python-dotenv",
        "pydantic",
        "pydantic-settings",
        "class-doc",
        "uvicorn",
    ],
    extras_require={
        'dev': [
            'pytest',
            'anyio',
            'httpx',
            'mypy',
            'flake8',
        ]
    },
    entry_points={
        'console_scripts': [
            'blobserve = blobserve.__main__:main'
        ]
    },
)
