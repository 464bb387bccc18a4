#!/usr/bin/env python
#
# File: $Id$
#
"""
Turn a stream of bytes in to a stream of parsed responses or commands.

The parsers keep no state. A reader keeps the bytes that have not been
parsed yet, and each time more arrive it parses from the start of the
pending unit again. When the parser says how many more bytes it needs (the
rest of a literal) we do not try again until they are here.
"""

# system imports
#
import logging
from typing import Any, AsyncIterator, List, Optional, Type

# imapwire imports
#
from .command import CommandParser
from .exceptions import BadSyntax, Incomplete
from .parse import IMAPParser
from .response import ResponseParser

logger = logging.getLogger("imapwire.stream")
trace_logger = logging.getLogger("imapwire.trace")


##################################################################
##################################################################
#
class UnitReader(object):
    """
    Buffers bytes and returns the units that can be parsed from them.
    """

    parser_class: Type[IMAPParser] = IMAPParser
    rule: Optional[str] = None

    ##################################################################
    #
    def __init__(self):
        self.buffer = b""
        self.units = 0
        # Do not try to parse again until the buffer is at least this long.
        #
        self.wait_for = 0

    ##################################################################
    #
    def __repr__(self):
        return "<%s %d units, %d bytes pending>" % (
            self.__class__.__name__,
            self.units,
            len(self.buffer),
        )

    ##################################################################
    #
    @property
    def pending(self) -> bool:
        """True if we hold part of a unit."""
        return len(self.buffer) > 0

    ##################################################################
    #
    def next_rule(self) -> Optional[str]:
        return self.rule

    ##################################################################
    #
    def feed(self, data: bytes) -> List[Any]:
        """
        Add `data` to what we have and return every unit that is now
        complete, in order. Raises `BadSyntax` if the pending bytes can
        not be a unit. The bad bytes stay in the buffer, see `skip_line()`.

        NOTE: If there are good units ahead of the bad one they are
              returned, and it is the next call that raises.
        """
        self.buffer += data
        result = []
        while self.buffer and len(self.buffer) >= self.wait_for:
            rule = self.next_rule()
            try:
                unit, self.buffer = self.parser_class(self.buffer).parse(rule)
            except Incomplete as exc:
                self.wait_for = len(self.buffer) + (exc.needed or 1)
                break
            except BadSyntax as exc:
                if result:
                    break
                logger.warning(
                    "%r: syntax error: %s, input: %r",
                    self,
                    exc,
                    self.buffer[:80],
                )
                raise

            self.wait_for = 0
            self.units += 1
            trace_logger.info(
                "decoded",
                extra={
                    "reader": self.__class__.__name__,
                    "rule": rule,
                    "unit": repr(unit),
                },
            )
            result.append(unit)
        return result

    ##################################################################
    #
    def skip_line(self) -> bytes:
        """
        Throw away everything up to and including the next line feed. This
        lets a caller carry on after a `BadSyntax`. Returns what was
        thrown away.
        """
        end = self.buffer.find(b"\n")
        end = len(self.buffer) if end == -1 else end + 1
        skipped, self.buffer = self.buffer[:end], self.buffer[end:]
        self.wait_for = 0
        return skipped


##################################################################
##################################################################
#
class ResponseReader(UnitReader):
    """
    Reads what a server sends. Unless `greeting` is False the first unit
    is expected to be the server greeting.
    """

    parser_class = ResponseParser
    rule = "response"

    ##################################################################
    #
    def __init__(self, greeting: bool = True):
        super().__init__()
        self.greeting = greeting

    ##################################################################
    #
    def next_rule(self) -> str:
        if self.greeting and self.units == 0:
            return "greeting"
        return self.rule


##################################################################
##################################################################
#
class CommandReader(UnitReader):
    """
    Reads what a client sends.
    """

    parser_class = CommandParser
    rule = "command"


####################################################################
#
async def read_units(
    stream, reader: UnitReader, chunk_size: int = 4096
) -> AsyncIterator[Any]:
    """
    Yield the units `reader` parses from `stream`, anything with an async
    `read(n)` method (an `asyncio.StreamReader`, an aiofiles file).

    Raises `Incomplete` if the stream ends part way through a unit.
    """
    while True:
        data = await stream.read(chunk_size)
        if not data:
            break
        for unit in reader.feed(data):
            yield unit

    # Raises a syntax error held back by the last feed().
    #
    for unit in reader.feed(b""):
        yield unit
    if reader.pending:
        raise Incomplete(
            "stream ended with %d bytes of an unfinished unit"
            % len(reader.buffer),
            position=0,
        )
