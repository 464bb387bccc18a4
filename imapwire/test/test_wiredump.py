"""
Test the capture decoding command line tool.
"""
# System imports
#
import sys

# 3rd party imports
#
import pytest

# Project imports
#
from ..wiredump import (
    EXIT_BAD_SYNTAX,
    EXIT_INCOMPLETE,
    EXIT_OK,
    dump_capture,
    main,
)


####################################################################
#
@pytest.mark.asyncio
async def test_dump_server_capture(capture_file, server_session, capsys):
    capture = capture_file(server_session)
    assert await dump_capture(str(capture), chunk_size=7) == EXIT_OK

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 6
    assert lines[0].startswith("Status(kind=<StatusKind.OK: 'ok'>")
    assert lines[3].startswith("FetchData(msg=1,")


####################################################################
#
@pytest.mark.asyncio
async def test_dump_client_capture(capture_file, client_session, capsys):
    capture = capture_file(client_session)
    assert await dump_capture(str(capture), commands=True) == EXIT_OK

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 5
    assert all(line.startswith("Command(tag='a") for line in lines)
    assert "sesame" not in lines[1]


####################################################################
#
@pytest.mark.asyncio
async def test_dump_without_greeting(capture_file, capsys):
    capture = capture_file(b"a1 OK done\r\n* 2 EXISTS\r\n")
    assert await dump_capture(str(capture)) == EXIT_BAD_SYNTAX
    assert capsys.readouterr().out == ""

    assert await dump_capture(str(capture), greeting=False) == EXIT_OK
    assert len(capsys.readouterr().out.splitlines()) == 2


####################################################################
#
@pytest.mark.asyncio
async def test_dump_bad_syntax(capture_file, capsys):
    capture = capture_file(b"* OK hi\r\n* FROB\r\n* 1 EXISTS\r\n")
    assert await dump_capture(str(capture)) == EXIT_BAD_SYNTAX
    assert len(capsys.readouterr().out.splitlines()) == 1


####################################################################
#
@pytest.mark.asyncio
async def test_dump_incomplete(capture_file, server_session, capsys):
    capture = capture_file(server_session[:-3])
    assert await dump_capture(str(capture)) == EXIT_INCOMPLETE
    assert len(capsys.readouterr().out.splitlines()) == 5


####################################################################
#
@pytest.fixture
def run_main(monkeypatch, mocker):
    """
    Returns a function that runs `main()` with the given command line
    arguments and .env values. `setup_logging` is mocked out.
    """
    setup_logging = mocker.patch("imapwire.wiredump.setup_logging")

    def runner(*args: str, env=None):
        monkeypatch.setattr(sys, "argv", ["imapwire-dump", *args])
        mocker.patch(
            "imapwire.wiredump.dotenv_values", return_value=env or {}
        )
        with pytest.raises(SystemExit) as exc:
            main()
        return exc.value.code, setup_logging

    return runner


####################################################################
#
def test_main(run_main, capture_file, server_session, capsys):
    capture = capture_file(server_session)
    code, setup_logging = run_main("--chunk-size=3", str(capture))
    assert code == EXIT_OK
    setup_logging.assert_called_once_with(None, False, trace_file=None)
    assert len(capsys.readouterr().out.splitlines()) == 6


####################################################################
#
def test_main_options_from_env(run_main, mocker, capture_file):
    dump_capture = mocker.patch(
        "imapwire.wiredump.dump_capture", return_value=EXIT_INCOMPLETE
    )
    capture = str(capture_file(b""))
    env = {
        "CHUNK_SIZE": "3",
        "DEBUG": "true",
        "LOG_CONFIG": "logging.cfg",
        "TRACE_FILE": "trace.json",
    }

    code, setup_logging = run_main("--commands", capture, env=env)
    assert code == EXIT_INCOMPLETE
    setup_logging.assert_called_once_with(
        "logging.cfg", True, trace_file="trace.json"
    )
    dump_capture.assert_called_once_with(
        capture, commands=True, greeting=True, chunk_size=3
    )

    # The command line wins over the env.
    #
    dump_capture.reset_mock()
    run_main("--no-greeting", "--chunk-size=9", capture, env=env)
    dump_capture.assert_called_once_with(
        capture, commands=False, greeting=False, chunk_size=9
    )


####################################################################
#
@pytest.mark.parametrize("chunk_size", ["abc", "0", "-4"])
def test_main_bad_chunk_size(run_main, capture_file, chunk_size):
    code, setup_logging = run_main(
        f"--chunk-size={chunk_size}", str(capture_file(b""))
    )
    assert isinstance(code, str)
    assert "Chunk size" in code
    setup_logging.assert_not_called()
