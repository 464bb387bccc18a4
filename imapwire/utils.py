"""
Things that do not belong to any one grammar: setting up logging and
working with parsed sequence sets.
"""

# system imports
#
import json
import logging
import logging.config
import sys
from itertools import count, groupby
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Optional

# Project imports
#
from .types import SeqNo, SeqRange, SeqSingle, SequenceSet

if TYPE_CHECKING:
    from _typeshed import StrPath


####################################################################
#
def setup_logging(
    log_config: Optional["StrPath"],
    debug: bool,
    trace_file: Optional["StrPath"] = None,
):
    """
    Set up the logger. If we are given a logging config file we use it:
    a ".json" file is a `dictConfig` dict, anything else is an INI style
    `fileConfig` file. Otherwise we log to stderr.

    If `trace_file` is given every unit the stream readers decode is also
    written to it as a line of JSON.
    """
    root_logger = logging.getLogger()
    if debug:
        root_logger.setLevel(logging.DEBUG)

    if log_config is not None:
        log_config = Path(log_config)
        if log_config.exists():
            if log_config.suffix == ".json":
                cfg = json.loads(log_config.read_text())
                logging.config.dictConfig(cfg)
            else:
                logging.config.fileConfig(str(log_config))
            return
        print(
            f"WARNING: Logging config '{log_config}' does not exist",
            file=sys.stderr,
        )

    # If no logging config file is specified then this is what will be used.
    # It is formatted as a logging config dict.
    #
    DEFAULT_LOGGING_CONFIG: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "basic": {
                "format": "[{asctime}] {levelname}:{name}.{funcName}: {message}",
                "style": "{",
            },
            "trace": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "basic",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "imapwire": {
                "handlers": ["console"],
                "level": "DEBUG" if debug else "INFO",
                "propagate": True,
            },
            # Only goes anywhere if there is a trace file.
            #
            "imapwire.trace": {
                "handlers": [],
                "level": "INFO",
                "propagate": False,
            },
        },
    }

    if trace_file:
        DEFAULT_LOGGING_CONFIG["handlers"]["trace_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "trace",
            "filename": str(trace_file),
            "maxBytes": 20971520,
            "backupCount": 5,
        }
        DEFAULT_LOGGING_CONFIG["loggers"]["imapwire.trace"]["handlers"] = [
            "trace_file"
        ]

    logging.config.dictConfig(DEFAULT_LOGGING_CONFIG)
    logger = logging.getLogger("imapwire.utils")
    logger.debug("Debug enabled")


####################################################################
#
def expand_sequence_set(
    seq_set: SequenceSet,
    seq_max: int,
    uid_cmd: bool = False,
) -> List[int]:
    """
    Convert a parsed sequence set in to a list of numbers.

    We collapse any overlaps and return the list sorted.

    NOTE: Using '*' in a mailbox that has no messages raises ValueError.
          So does any sequence number greater than the size of the
          mailbox.

    Arguments:
    - `seq_set`: The sequence set we want to convert to a list of numbers.
    - `seq_max`: The largest possible number in the sequence. We
                 replace '*' with this value.
    - `uid_cmd`: This is a UID command sequence and the sequence set can include
                 numbers larger than seq_max.
    """

    def value(seq: SeqNo) -> int:
        if seq.unlimited:
            if seq_max == 0 and not uid_cmd:
                raise ValueError(
                    "Message index '*' is invalid in empty mailbox when not a uid command"
                )
            return seq_max
        if seq.value > seq_max and not uid_cmd:
            raise ValueError(
                f"Message index '{seq}' is greater than the size of the mailbox"
            )
        return seq.value

    result = set()
    for elt in seq_set:
        match elt:
            case SeqSingle(seq):
                result.add(value(seq))
            case SeqRange(start, end):
                start, end = value(start), value(end)
                # In a range it may be <start>:<end> or <end>:<start>
                #
                if start > end:
                    start, end = end, start
                result.update(range(start, end + 1))
            case _:
                raise TypeError(f"not part of a sequence set: {elt!r}")
    return sorted(result)


############################################################################
#
def compact_sequence_set(keys: Iterable[int]) -> SequenceSet:
    """
    Turns numbers in to the shortest sequence set that holds them.
    Contiguous runs become ranges: 1,3,4,5,6 is (1, 3:6)

    A sequence set holds at least one number, so no keys is a ValueError.
    """

    def as_seq(iterable: Iterator[int]):
        grouped_ints = list(iterable)
        if len(grouped_ints) > 1:
            return SeqRange(SeqNo(grouped_ints[0]), SeqNo(grouped_ints[-1]))
        return SeqSingle(SeqNo(grouped_ints[0]))

    keys = sorted(set(keys))
    if not keys:
        raise ValueError("a sequence set needs at least one number")
    return tuple(
        as_seq(g)
        for _, g in groupby(keys, key=lambda n, c=count(): n - next(c))
    )
