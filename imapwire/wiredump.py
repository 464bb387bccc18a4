#!/usr/bin/env python
#
# File: $Id$
#
"""
Decode a captured IMAP session and print what is in it, one response or
command per line.

A capture is the raw bytes of one direction of a connection: what the
server sent (the default) or what the client sent (`--commands`).

Exits with 1 if the capture has a syntax error in it, and 2 if it ends part
way through a response or command.

NOTE: For all command line options that can also be specified via an env. var:
      the command line option will override the env. var if set.

Usage:
  imapwire-dump [--commands] [--no-greeting] [--chunk-size=<n>] [--debug]
                [--log-config=<lc>] [--trace=<trace>] <capture>
  imapwire-dump (-h | --help)
  imapwire-dump --version

Options:
  --version
  -h, --help         Show this text and exit
  --commands         The capture is what a client sent.
  --no-greeting      The capture of what the server sent does not start with
                     the greeting.
  --chunk-size=<n>   Read the capture this many bytes at a time. Defaults to
                     4096. The env. var is `CHUNK_SIZE`
  --debug            Will set the default logging level to `DEBUG` thus
                     enabling all of the debug logging. The env var is `DEBUG`
  --log-config=<lc>  The log config file. This file may be either a JSON file
                     that follows the python logging configuration dictionary
                     schema or a file that conforms to the python logging
                     configuration file format. If no file is specified we
                     log to stderr. The env. var is `LOG_CONFIG`
  --trace=<trace>    Write every decoded unit to this file as a line of JSON.
                     The env. var is `TRACE_FILE`
"""
# system imports
#
import asyncio
import logging
import sys

# 3rd party imports
#
import aiofiles
from docopt import docopt
from dotenv import dotenv_values

# Application imports
#
from imapwire import __version__ as VERSION
from imapwire.exceptions import BadSyntax, Incomplete
from imapwire.stream import CommandReader, ResponseReader, read_units
from imapwire.utils import setup_logging

logger = logging.getLogger("imapwire.wiredump")

EXIT_OK = 0
EXIT_BAD_SYNTAX = 1
EXIT_INCOMPLETE = 2

DEFAULT_CHUNK_SIZE = 4096


#############################################################################
#
async def dump_capture(
    capture: str,
    commands: bool = False,
    greeting: bool = True,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """
    Print every unit in the capture file. Returns the exit status.
    """
    if commands:
        reader = CommandReader()
    else:
        reader = ResponseReader(greeting=greeting)

    try:
        async with aiofiles.open(capture, "rb") as f:
            async for unit in read_units(f, reader, chunk_size):
                print(repr(unit))
    except BadSyntax as exc:
        logger.error("%s: after %d units: %s", capture, reader.units, exc)
        return EXIT_BAD_SYNTAX
    except Incomplete as exc:
        logger.error("%s: %s", capture, exc)
        return EXIT_INCOMPLETE

    logger.debug("%s: %d units", capture, reader.units)
    return EXIT_OK


#############################################################################
#
def main():
    """
    Parse the options, set up logging and decode the capture.
    """
    args = docopt(__doc__, version=VERSION)
    capture = args["<capture>"]
    commands = args["--commands"]
    greeting = not args["--no-greeting"]
    chunk_size = args["--chunk-size"]
    debug = args["--debug"]
    log_config = args["--log-config"]
    trace_file = args["--trace"]

    config = dotenv_values()

    # If docopt is not set, see if the option is set in the config. If it not
    # set there either, then set it to the default value.
    #
    if chunk_size is None:
        chunk_size = (
            config["CHUNK_SIZE"]
            if "CHUNK_SIZE" in config
            else DEFAULT_CHUNK_SIZE
        )
    if not debug:
        debug = str(config.get("DEBUG", "")).lower() in ("1", "true", "yes")
    if log_config is None:
        log_config = config["LOG_CONFIG"] if "LOG_CONFIG" in config else None
    if trace_file is None:
        trace_file = config["TRACE_FILE"] if "TRACE_FILE" in config else None

    try:
        chunk_size = int(chunk_size)
    except ValueError:
        sys.exit(f"Chunk size must be a number, not '{chunk_size}'")
    if chunk_size < 1:
        sys.exit(f"Chunk size must be at least 1, not {chunk_size}")

    setup_logging(log_config, debug, trace_file=trace_file)
    sys.exit(
        asyncio.run(
            dump_capture(
                capture,
                commands=commands,
                greeting=greeting,
                chunk_size=chunk_size,
            )
        )
    )


############################################################################
############################################################################
#
if __name__ == "__main__":
    main()
