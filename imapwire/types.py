"""
The values the grammar produces.

Every value is immutable once constructed: they are frozen dataclasses and
anything list shaped is a tuple. Closed vocabularies are `StrEnum`s whose
values are the canonical (lower case) wire token. Open vocabularies
(capabilities, quota resources, response codes) have an OTHER kind that
carries the raw token as it was sent.
"""

# system imports
#
from base64 import b64decode
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional, Tuple, TypeAlias, Union


########################################################################
########################################################################
#
class StatusKind(StrEnum):
    OK = "ok"
    NO = "no"
    BAD = "bad"
    PREAUTH = "preauth"
    BYE = "bye"


STR_TO_STATUS_KIND = {kind.value: kind for kind in StatusKind}


########################################################################
########################################################################
#
class CodeKind(StrEnum):
    ALERT = "alert"
    BADCHARSET = "badcharset"
    CAPABILITY = "capability"
    PARSE = "parse"
    PERMANENTFLAGS = "permanentflags"
    READ_ONLY = "read-only"
    READ_WRITE = "read-write"
    TRYCREATE = "trycreate"
    UIDNEXT = "uidnext"
    UIDVALIDITY = "uidvalidity"
    UNSEEN = "unseen"
    OTHER = "other"


########################################################################
########################################################################
#
# Note that only the kinds that are a plain keyword can be looked up by
# name. AUTH= and QUOTA=RES- carry a parameter and OTHER carries the raw
# token.
#
class CapabilityKind(StrEnum):
    IMAP4REV1 = "imap4rev1"
    STARTTLS = "starttls"
    IDLE = "idle"
    MAILBOX_REFERRALS = "mailbox-referrals"
    LOGIN_REFERRALS = "login-referrals"
    SASL_IR = "sasl-ir"
    ENABLE = "enable"
    AUTH = "auth="
    QUOTASET = "quotaset"
    QUOTA_RES = "quota=res-"
    QUOTA = "quota"
    OTHER = "other"


PARAMETER_CAPABILITIES = (
    CapabilityKind.AUTH,
    CapabilityKind.QUOTA_RES,
    CapabilityKind.OTHER,
)
KEYWORD_CAPABILITIES = {
    kind.value: kind
    for kind in CapabilityKind
    if kind not in PARAMETER_CAPABILITIES
}


########################################################################
########################################################################
#
class ResourceKind(StrEnum):
    STORAGE = "storage"
    MESSAGE = "message"
    MAILBOX = "mailbox"
    ANNOTATION_STORAGE = "annotation-storage"
    OTHER = "other"


KNOWN_RESOURCES = {
    kind.value: kind for kind in ResourceKind if kind is not ResourceKind.OTHER
}


########################################################################
########################################################################
#
class StatusAttribute(StrEnum):
    MESSAGES = "messages"
    RECENT = "recent"
    UIDNEXT = "uidnext"
    UIDVALIDITY = "uidvalidity"
    UNSEEN = "unseen"


STR_TO_STATUS_ATTRIBUTE = {att.value: att for att in StatusAttribute}


########################################################################
########################################################################
#
class StoreAction(StrEnum):
    REPLACE = "flags"
    ADD = "+flags"
    REMOVE = "-flags"


########################################################################
########################################################################
#
@dataclass(frozen=True)
class Resource:
    """
    A quota resource. Classification against the known resources happens
    before the OTHER fallback so an OTHER never holds a known name.
    """

    kind: ResourceKind
    other: Optional[str] = None

    def __post_init__(self):
        if self.kind is ResourceKind.OTHER:
            if not self.other:
                raise ValueError("OTHER resource requires the resource name")
            if self.other.lower() in KNOWN_RESOURCES:
                raise ValueError(
                    f"'{self.other}' is a known resource, not an OTHER"
                )
        elif self.other is not None:
            raise ValueError(f"{self.kind.name} resource takes no name")

    @classmethod
    def from_atom(cls, atom: str) -> "Resource":
        kind = KNOWN_RESOURCES.get(atom.lower())
        if kind is None:
            return cls(ResourceKind.OTHER, atom)
        return cls(kind)

    def __str__(self):
        if self.kind is ResourceKind.OTHER:
            return self.other
        return self.kind.value.upper()


########################################################################
########################################################################
#
@dataclass(frozen=True)
class Capability:
    """
    A capability the server advertises. `value` is the mechanism name for
    AUTH=, the `Resource` for QUOTA=RES- and the raw token for OTHER.
    """

    kind: CapabilityKind
    value: Union[None, str, Resource] = None

    def __post_init__(self):
        match self.kind:
            case CapabilityKind.AUTH:
                if not isinstance(self.value, str) or not self.value:
                    raise ValueError("AUTH= capability requires a mechanism")
            case CapabilityKind.QUOTA_RES:
                if not isinstance(self.value, Resource):
                    raise ValueError("QUOTA=RES- capability requires a resource")
            case CapabilityKind.OTHER:
                if not isinstance(self.value, str) or not self.value:
                    raise ValueError("OTHER capability requires the token")
                lowered = self.value.lower()
                if lowered in KEYWORD_CAPABILITIES or any(
                    lowered.startswith(kind.value)
                    and len(lowered) > len(kind.value)
                    for kind in (CapabilityKind.AUTH, CapabilityKind.QUOTA_RES)
                ):
                    raise ValueError(
                        f"'{self.value}' is a known capability, not an OTHER"
                    )
            case _:
                if self.value is not None:
                    raise ValueError(f"{self.kind.name} takes no parameter")

    def __str__(self):
        match self.kind:
            case CapabilityKind.AUTH:
                return f"AUTH={self.value}"
            case CapabilityKind.QUOTA_RES:
                return f"QUOTA=RES-{self.value}"
            case CapabilityKind.OTHER:
                return self.value
            case CapabilityKind.IMAP4REV1:
                return "IMAP4rev1"
            case _:
                return self.kind.value.upper()


IMAP4REV1 = Capability(CapabilityKind.IMAP4REV1)


########################################################################
########################################################################
#
@dataclass(frozen=True)
class Code:
    """
    A response code, the bracketed part of a status or continuation line.

    `value` holds the argument of the known codes: a tuple of charsets,
    capabilities or flags, or an integer. An OTHER code keeps its `atom` as
    sent and the optional parameter `text`.
    """

    kind: CodeKind
    value: Union[None, int, Tuple[Any, ...]] = None
    atom: Optional[str] = None
    text: Optional[str] = None

    def __post_init__(self):
        if self.kind is CodeKind.OTHER and not self.atom:
            raise ValueError("OTHER code requires its atom")


########################################################################
########################################################################
#
@dataclass(frozen=True)
class Status:
    """
    A status response. Tagged forms complete a client command, untagged ones
    are server initiated. PREAUTH and BYE are never tagged.
    """

    kind: StatusKind
    text: str
    tag: Optional[str] = None
    code: Optional[Code] = None

    def __post_init__(self):
        if self.tag is not None and self.kind in (
            StatusKind.PREAUTH,
            StatusKind.BYE,
        ):
            raise ValueError(f"{self.kind.name} status can not be tagged")

    @property
    def tagged(self) -> bool:
        return self.tag is not None


########################################################################
########################################################################
#
@dataclass(frozen=True)
class Continuation:
    """
    A continuation request. Carries either human readable text (and maybe a
    code) or an opaque base64 payload, never both.
    """

    text: Optional[str] = None
    code: Optional[Code] = None
    base64: Optional[str] = None

    def __post_init__(self):
        if self.base64 is not None:
            if self.text is not None or self.code is not None:
                raise ValueError("base64 continuation can not carry text")
        elif self.text is None:
            raise ValueError("continuation requires text or base64 data")

    @property
    def decoded(self) -> bytes:
        if self.base64 is None:
            raise ValueError("continuation has no base64 data")
        return b64decode(self.base64, validate=True)


########################################################################
########################################################################
#
# Sequence sets. A SeqNo with a value of None is "*", the largest number
# in use.
#
@dataclass(frozen=True)
class SeqNo:
    value: Optional[int] = None

    def __post_init__(self):
        if self.value is not None and self.value < 1:
            raise ValueError(
                f"sequence numbers must be greater than 0: {self.value}"
            )

    @property
    def unlimited(self) -> bool:
        return self.value is None

    def __str__(self):
        return "*" if self.value is None else str(self.value)


UNLIMITED = SeqNo()


@dataclass(frozen=True)
class SeqSingle:
    seq: SeqNo

    def __str__(self):
        return str(self.seq)


@dataclass(frozen=True)
class SeqRange:
    start: SeqNo
    end: SeqNo

    def __str__(self):
        return f"{self.start}:{self.end}"


SequenceSet: TypeAlias = Tuple[Union[SeqSingle, SeqRange], ...]


########################################################################
########################################################################
#
# Untagged data. `Data` is open: extensions add subclasses of their own.
#
class Data:
    """Base class of all untagged server data."""


@dataclass(frozen=True)
class CapabilityData(Data):
    capabilities: Tuple[Capability, ...]


@dataclass(frozen=True)
class EnabledData(Data):
    capabilities: Tuple[Capability, ...] = ()


@dataclass(frozen=True)
class FlagsData(Data):
    flags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ListData(Data):
    """The answer to LIST or LSUB, `command` says which."""

    command: str
    attributes: Tuple[str, ...]
    delimiter: Optional[str]
    mailbox: str


@dataclass(frozen=True)
class SearchData(Data):
    ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class StatusData(Data):
    mailbox: str
    attributes: Tuple[Tuple[StatusAttribute, int], ...] = ()


@dataclass(frozen=True)
class ExistsData(Data):
    count: int


@dataclass(frozen=True)
class RecentData(Data):
    count: int


@dataclass(frozen=True)
class ExpungeData(Data):
    msg: int


@dataclass(frozen=True)
class Address:
    name: Optional[bytes]
    adl: Optional[bytes]
    mailbox: Optional[bytes]
    host: Optional[bytes]


@dataclass(frozen=True)
class Envelope:
    date: Optional[bytes]
    subject: Optional[bytes]
    from_: Optional[Tuple[Address, ...]]
    sender: Optional[Tuple[Address, ...]]
    reply_to: Optional[Tuple[Address, ...]]
    to: Optional[Tuple[Address, ...]]
    cc: Optional[Tuple[Address, ...]]
    bcc: Optional[Tuple[Address, ...]]
    in_reply_to: Optional[bytes]
    message_id: Optional[bytes]


@dataclass(frozen=True)
class FetchData(Data):
    """
    A FETCH response. `attributes` is a tuple of (NAME, value) pairs in the
    order the server sent them. Names are upper case, BODY sections keep
    their section and origin, ie: "BODY[HEADER]<0>".
    """

    msg: int
    attributes: Tuple[Tuple[str, Any], ...]

    def get(self, name: str, default: Any = None) -> Any:
        name = name.upper()
        for att, value in self.attributes:
            if att == name:
                return value
        return default


Response: TypeAlias = Union[Status, Continuation, Data]


########################################################################
########################################################################
#
# Client commands. `CommandBody` is open like `Data`.
#
class CommandBody:
    """Base class of the parsed arguments of a client command."""


@dataclass(frozen=True)
class Command:
    tag: str
    body: CommandBody


@dataclass(frozen=True)
class SimpleCommand(CommandBody):
    """A command that takes no arguments, ie: NOOP."""

    name: str


@dataclass(frozen=True)
class Authenticate(CommandBody):
    mechanism: str
    initial_response: Optional[str] = None


@dataclass(frozen=True)
class Login(CommandBody):
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class MailboxCommand(CommandBody):
    """SELECT, EXAMINE, CREATE, DELETE, SUBSCRIBE or UNSUBSCRIBE."""

    name: str
    mailbox: str


@dataclass(frozen=True)
class Rename(CommandBody):
    old_mailbox: str
    new_mailbox: str


@dataclass(frozen=True)
class ListCommand(CommandBody):
    name: str
    reference: str
    pattern: str


@dataclass(frozen=True)
class StatusCommand(CommandBody):
    mailbox: str
    attributes: Tuple[StatusAttribute, ...]


@dataclass(frozen=True)
class Copy(CommandBody):
    sequence_set: SequenceSet
    mailbox: str
    uid: bool = False


@dataclass(frozen=True)
class Store(CommandBody):
    sequence_set: SequenceSet
    action: StoreAction
    flags: Tuple[str, ...]
    silent: bool = False
    uid: bool = False


@dataclass(frozen=True)
class UidExpunge(CommandBody):
    sequence_set: SequenceSet


@dataclass(frozen=True)
class Enable(CommandBody):
    capabilities: Tuple[Capability, ...]


