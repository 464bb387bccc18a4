#!/usr/bin/env python
#

from setuptools import find_packages, setup

from imapwire import __version__

setup(
    name="imapwire",
    version=__version__,
    description="A streaming parser for the IMAP4rev1 wire protocol",
    long_description=(
        "imapwire parses what IMAP clients and servers send each other, "
        "a chunk of bytes at a time, in to immutable python values."
    ),
    author="Scanner",
    author_email="scanner@apricot.com",
    url="https://github.com/scanner/imapwire",
    packages=find_packages(),
    package_data={"imapwire.test": ["fixtures/*"]},
    python_requires=">=3.11",
    install_requires=[
        "aiofiles",
        "docopt",
        "python-dotenv",
        "python-json-logger>=3.1",
        "pytz",
    ],
    extras_require={
        "test": [
            "dirty-equals",
            "Faker",
            "pytest",
            "pytest-asyncio",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": ["imapwire-dump = imapwire.wiredump:main"],
    },
)
