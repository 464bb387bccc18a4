"""
Test our util functions
"""
# System imports
#
import json
import logging

# 3rd party imports
#
import pytest

# Project imports
#
from ..command import parse_sequence_set
from ..types import SeqNo, SeqRange, SeqSingle
from ..utils import (
    compact_sequence_set,
    expand_sequence_set,
    setup_logging,
)


####################################################################
#
def seq_set(data: str):
    value, _ = parse_sequence_set(data.encode("ascii"), complete=True)
    return value


####################################################################
#
@pytest.mark.parametrize(
    "data,seq_max,expected",
    [
        ("1:3,5,*", 7, [1, 2, 3, 5, 7]),
        ("4:2", 10, [2, 3, 4]),
        ("*:4", 6, [4, 5, 6]),
        ("2,2,1:3", 3, [1, 2, 3]),
        ("1:*", 1, [1]),
    ],
)
def test_expand_sequence_set(data, seq_max, expected):
    assert expand_sequence_set(seq_set(data), seq_max) == expected


####################################################################
#
def test_expand_sequence_set_bounds():
    with pytest.raises(ValueError):
        expand_sequence_set(seq_set("*"), 0)
    with pytest.raises(ValueError):
        expand_sequence_set(seq_set("10"), 5)

    # UIDs can be larger than the number of messages.
    #
    assert expand_sequence_set(seq_set("10,3"), 5, uid_cmd=True) == [3, 10]


####################################################################
#
def test_compact_sequence_set():
    assert compact_sequence_set([1, 3, 4, 5, 6]) == (
        SeqSingle(SeqNo(1)),
        SeqRange(SeqNo(3), SeqNo(6)),
    )
    assert compact_sequence_set([9, 1, 2, 2, 8]) == (
        SeqRange(SeqNo(1), SeqNo(2)),
        SeqRange(SeqNo(8), SeqNo(9)),
    )
    with pytest.raises(ValueError):
        compact_sequence_set([])
    with pytest.raises(ValueError):
        compact_sequence_set(())


####################################################################
#
def test_compact_expand_round_trip(faker):
    for _ in range(10):
        keys = [faker.pyint(min_value=1, max_value=200) for _ in range(50)]
        compacted = compact_sequence_set(keys)
        assert expand_sequence_set(compacted, max(keys)) == sorted(set(keys))


####################################################################
#
@pytest.fixture
def reset_logging():
    """
    setup_logging() configures the logging module globally. Put our
    loggers back the way they were when the test is done.
    """
    names = ("imapwire", "imapwire.trace", "imapwire.configured")
    saved = {}
    for name in names:
        logger = logging.getLogger(name)
        saved[name] = (logger.handlers[:], logger.level, logger.propagate)
    yield
    for name in names:
        logger = logging.getLogger(name)
        handlers, level, propagate = saved[name]
        for handler in logger.handlers:
            if handler not in handlers:
                handler.close()
        logger.handlers = handlers
        logger.setLevel(level)
        logger.propagate = propagate


####################################################################
#
def test_setup_logging_json_config(tmp_path, reset_logging):
    log_config = tmp_path / "logging.json"
    log_config.write_text(
        json.dumps(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "loggers": {"imapwire.configured": {"level": "WARNING"}},
            }
        )
    )
    setup_logging(log_config, False)
    assert logging.getLogger("imapwire.configured").level == logging.WARNING


####################################################################
#
def test_setup_logging_missing_config(tmp_path, capsys, reset_logging):
    setup_logging(tmp_path / "nope.json", False)
    assert "does not exist" in capsys.readouterr().err
    assert logging.getLogger("imapwire").level == logging.INFO
    assert not logging.getLogger("imapwire.trace").propagate


####################################################################
#
def test_setup_logging_trace_file(tmp_path, reset_logging):
    trace_file = tmp_path / "trace.json"
    setup_logging(None, False, trace_file=trace_file)

    trace_logger = logging.getLogger("imapwire.trace")
    trace_logger.info("decoded", extra={"rule": "response", "unit": "x"})
    for handler in trace_logger.handlers:
        handler.flush()

    lines = trace_file.read_text().splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["message"] == "decoded"
    assert record["rule"] == "response"
    assert record["unit"] == "x"
