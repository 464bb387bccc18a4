"""
pytest fixtures for testing `imapwire`
"""
# System imports
#
import json
from pathlib import Path
from typing import List, Tuple

# 3rd party imports
#
import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# What a server might send over one short connection.
#
SERVER_SESSION = (
    b"* OK [CAPABILITY IMAP4rev1 STARTTLS AUTH=PLAIN] Dovecot ready.\r\n"
    b"* CAPABILITY IMAP4rev1 IDLE QUOTA\r\n"
    b"a1 OK Pre-login capabilities listed, post-login capabilities have more.\r\n"
    b"* 1 FETCH (RFC822 {5}\r\nhello)\r\n"
    b"+ idling\r\n"
    b"* BYE Logging out\r\n"
)

# ... and what the client sent.
#
CLIENT_SESSION = (
    b"a1 CAPABILITY\r\n"
    b"a2 LOGIN fred {6}\r\nsesame\r\n"
    b"a3 SELECT inbox\r\n"
    b"a4 UID STORE 1:* +FLAGS.SILENT (\\Seen)\r\n"
    b"a5 LOGOUT\r\n"
)


####################################################################
#
def _load_wire_samples(name: str) -> List[Tuple[bytes, str]]:
    samples = json.loads((FIXTURES_DIR / name).read_text())
    return [(wire.encode("latin-1"), kind) for wire, kind in samples]


####################################################################
#
@pytest.fixture
def good_responses():
    """
    A list of (wire bytes, name of the type it parses to) of server
    responses we know should parse.
    """
    return _load_wire_samples("good_responses.json")


####################################################################
#
@pytest.fixture
def good_commands():
    """
    A list of (wire bytes, name of the type of the command body) of client
    commands we know should parse.
    """
    return _load_wire_samples("good_commands.json")


####################################################################
#
@pytest.fixture
def server_session():
    return SERVER_SESSION


####################################################################
#
@pytest.fixture
def client_session():
    return CLIENT_SESSION


####################################################################
#
@pytest.fixture
def capture_file(tmp_path):
    """
    Returns a function that writes the bytes it is given to a capture file
    and returns the path to it.
    """

    def make_capture(data: bytes, name: str = "session.cap") -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return make_capture
