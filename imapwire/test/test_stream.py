"""
Test the readers that turn a stream of bytes in to parsed units.
"""
# System imports
#
import asyncio

# 3rd party imports
#
import pytest
from dirty_equals import IsPartialDict

# Project imports
#
from ..exceptions import BadSyntax, Incomplete
from ..response import ResponseParser
from ..stream import CommandReader, ResponseReader, read_units
from ..types import (
    CapabilityData,
    Continuation,
    ExistsData,
    FetchData,
    Login,
    MailboxCommand,
    SimpleCommand,
    Status,
    StatusKind,
    Store,
)


####################################################################
#
def test_response_reader_byte_at_a_time(server_session):
    """
    Feeding one byte at a time gives the same units as feeding the whole
    session at once.
    """
    reader = ResponseReader()
    units = []
    for i in range(len(server_session)):
        units.extend(reader.feed(server_session[i : i + 1]))

    assert [type(unit) for unit in units] == [
        Status,
        CapabilityData,
        Status,
        FetchData,
        Continuation,
        Status,
    ]
    assert units[0].kind == StatusKind.OK
    assert units[2].tag == "a1"
    assert units[3] == FetchData(1, (("RFC822", b"hello"),))
    assert units[5].kind == StatusKind.BYE
    assert reader.units == 6
    assert not reader.pending

    assert ResponseReader().feed(server_session) == units


####################################################################
#
def test_command_reader(client_session):
    reader = CommandReader()
    units = []
    for i in range(0, len(client_session), 5):
        units.extend(reader.feed(client_session[i : i + 5]))

    assert [unit.tag for unit in units] == ["a1", "a2", "a3", "a4", "a5"]
    assert units[0].body == SimpleCommand("CAPABILITY")
    assert units[1].body == Login("fred", "sesame")
    assert units[2].body == MailboxCommand("SELECT", "INBOX")
    assert isinstance(units[3].body, Store)
    assert units[3].body.uid
    assert units[3].body.silent
    assert units[4].body == SimpleCommand("LOGOUT")
    assert not reader.pending


####################################################################
#
def test_greeting_comes_first():
    """
    The first unit from a server has to be a greeting, after that a
    tagged response is fine.
    """
    with pytest.raises(BadSyntax):
        ResponseReader().feed(b"a1 OK done\r\n")

    reader = ResponseReader(greeting=False)
    assert reader.feed(b"a1 OK done\r\n") == [Status(StatusKind.OK, "done", tag="a1")]


####################################################################
#
def test_literal_is_not_reparsed_until_it_is_here(mocker):
    """
    Once we know how long a literal is we do not parse again until all of
    it has arrived.
    """
    spy = mocker.spy(ResponseParser, "parse")
    reader = ResponseReader(greeting=False)

    assert reader.feed(b"* 1 FETCH (RFC822 {10}\r\n") == []
    assert spy.call_count == 1
    assert reader.feed(b"abc") == []
    assert reader.feed(b"defg") == []
    assert spy.call_count == 1
    assert reader.pending

    units = reader.feed(b"hij)\r\n* 2 EXISTS\r\n")
    assert units == [
        FetchData(1, (("RFC822", b"abcdefghij"),)),
        ExistsData(2),
    ]
    assert not reader.pending


####################################################################
#
def test_huge_literal_length():
    reader = ResponseReader(greeting=False)
    with pytest.raises(BadSyntax):
        reader.feed(b"* 1 FETCH (RFC822 {" + b"1" * 5000 + b"}\r\n")
    assert reader.pending


####################################################################
#
def test_skip_line_after_bad_syntax():
    reader = ResponseReader(greeting=False)
    with pytest.raises(BadSyntax):
        reader.feed(b"* FROB it\r\n* 3 EXISTS\r\n")
    assert reader.pending

    assert reader.skip_line() == b"* FROB it\r\n"
    assert reader.feed(b"") == [ExistsData(3)]
    assert not reader.pending


####################################################################
#
def test_good_units_before_bad_syntax_are_returned():
    reader = ResponseReader(greeting=False)
    assert reader.feed(b"* 2 EXISTS\r\n* FROB\r\n") == [ExistsData(2)]
    with pytest.raises(BadSyntax):
        reader.feed(b"")
    assert reader.buffer == b"* FROB\r\n"


####################################################################
#
@pytest.mark.asyncio
async def test_read_units_bad_syntax_at_end():
    stream = asyncio.StreamReader()
    stream.feed_data(b"* 2 EXISTS\r\n* FROB\r\n")
    stream.feed_eof()

    units = []
    with pytest.raises(BadSyntax):
        async for unit in read_units(stream, ResponseReader(greeting=False)):
            units.append(unit)
    assert units == [ExistsData(2)]


####################################################################
#
def test_decoded_units_are_traced(mocker):
    trace = mocker.patch("imapwire.stream.trace_logger")
    reader = ResponseReader(greeting=False)
    reader.feed(b"* 3 EXISTS\r\n")

    trace.info.assert_called_once_with(
        "decoded",
        extra=IsPartialDict(
            reader="ResponseReader", rule="response", unit=repr(ExistsData(3))
        ),
    )


####################################################################
#
@pytest.mark.asyncio
async def test_read_units(server_session):
    stream = asyncio.StreamReader()
    stream.feed_data(server_session)
    stream.feed_eof()

    units = [unit async for unit in read_units(stream, ResponseReader(), 7)]
    assert len(units) == 6
    assert units[-1] == Status(StatusKind.BYE, "Logging out")


####################################################################
#
@pytest.mark.asyncio
async def test_read_units_stream_ends_early(server_session):
    stream = asyncio.StreamReader()
    stream.feed_data(server_session[:-3])
    stream.feed_eof()

    units = []
    with pytest.raises(Incomplete):
        async for unit in read_units(stream, ResponseReader(), 7):
            units.append(unit)
    assert len(units) == 5
