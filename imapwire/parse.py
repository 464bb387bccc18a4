#!/usr/bin/env python
#
# File: $Id$
#
"""
The grammar engine shared by the response and the command parsers.

`IMAPParser` is built over one byte buffer. Every `_p_*` method recognizes one
grammar rule at the cursor: on success it swallows what it matched and
returns the decoded value, otherwise it raises. The exceptions are the
outcome signals:

  `Incomplete` - the input ran out while it was still a valid prefix.
  `NoMatch`    - this rule can not match here. Ordered alternation rewinds
                 and tries the next alternative.
  `BadSyntax`  - hard failure, never retried.

A parser keeps nothing between parses. Callers that get `Incomplete` append
the newly arrived bytes to what they had and parse again from the start with
a fresh parser (see `imapwire.stream`).

When a parser is built with `complete=True` the end of the buffer is treated
as the end of the unit, so a token running up to the end of the buffer is
accepted instead of reported as incomplete.
"""

# system imports
#
import logging
import re
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple

# 3rd party imports
#
import pytz

# imapwire imports
#
from .exceptions import BadSyntax, Incomplete, NoMatch
from .types import (
    IMAP4REV1,
    STR_TO_STATUS_ATTRIBUTE,
    UNLIMITED,
    Capability,
    CapabilityKind,
    SeqNo,
    SeqRange,
    SeqSingle,
    StatusAttribute,
)

MAX_NUMBER = 2**32 - 1
MAX_NUMBER64 = 2**64 - 1

_month = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

# The names of the grammar rules that are dispatched on a keyword (response
# codes, data, commands) are made from the keyword. Only keywords made of
# these characters can name a rule.
#
_rule_keyword_re = re.compile(r"[a-z][a-z0-9-]*")

# Lots of regular expressions. All of them are token classes: one or more
# characters from a set. They all work on bytes.

# An atom is one or more characters that is not an atom special
# ie: "(" / ")" / "{" / SP / CTL / list_wildcards / quoted_specials /
# resp_specials. IMAP4rev1 atoms are 7-bit.
#
_atom_re = re.compile(rb'[^(){ %*"\\\]\x00-\x1f\x7f-\xff]+')

# An astring that is not a string may also have the ']' resp_special in it.
#
_astring_atom_re = re.compile(rb'[^(){ %*"\\\x00-\x1f\x7f-\xff]+')

# A list_mailbox is like an astring atom, except we allow list_wildcards ('*'
# and '%')
#
_list_mailbox_re = re.compile(rb'[^(){ "\\\x00-\x1f\x7f-\xff]+')

# A tag is an astring atom, except '+' is not allowed also.
#
_tag_re = re.compile(rb'[^+(){ %*"\\\x00-\x1f\x7f-\xff]+')

# TEXT-CHAR is any 7-bit CHAR except CR and LF.
#
_text_re = re.compile(rb"[\x01-\x09\x0b\x0c\x0e-\x7f]+")

_number_re = re.compile(rb"[0-9]+")

# base64 may be empty, it is always followed by a line terminator. The
# regular expression only finds where the token ends, its length is checked
# after.
#
_base64_re = re.compile(rb"[A-Za-z0-9+/]*={0,2}")

# date-time = DQUOTE date-day-fixed "-" date-month "-" date-year
#             SP time SP zone DQUOTE
# (the DQUOTEs are removed by the quoted string parser)
#
_date_time_re = re.compile(
    r"(?P<day>[ \d]\d)-(?P<month>[A-Za-z]{3})-(?P<year>\d{4}) "
    r"(?P<hour>\d\d):(?P<min>\d\d):(?P<sec>\d\d) "
    r"(?P<tz_sign>[-+])(?P<tz_hr>\d\d)(?P<tz_min>\d\d)"
)

_digits = b"0123456789"
_nz_digits = b"123456789"


############################################################################
#
def rule_method_name(prefix: str, keyword: str) -> Optional[str]:
    """
    The name of the method that parses the rule introduced by `keyword`,
    ie: ("_p_code_", "READ-ONLY") -> "_p_code_read_only". None if the keyword
    can not name a rule.
    """
    keyword = keyword.lower()
    if _rule_keyword_re.fullmatch(keyword) is None:
        return None
    return prefix + keyword.replace("-", "_")


############################################################################
#
class IMAPParser(object):
    """
    The lexical primitives and the grammar rules that responses and commands
    have in common: strings, numbers, flags, mailbox names, sequence sets
    and capabilities.

    This class is never used on its own: the capabilities of the QUOTA
    extension are known capabilities, so only a parser with the extension
    mixed in can classify every capability. Use `ResponseParser` or
    `CommandParser`. Create one per buffer and call `parse()` with the
    name of the grammar rule to run. It returns the decoded value and the
    bytes it did not consume.
    """

    # The rule `parse()` runs when it is not told which one.
    #
    start_rule: Optional[str] = None

    # Non-synchronizing literals ('{5+}') may only be sent by clients.
    #
    allow_literal_plus = False

    # The capability keywords the core grammar knows. Extensions recognize
    # their own by overriding `_classify_capability()`.
    #
    capability_keywords = {
        kind.value: kind
        for kind in (
            CapabilityKind.IMAP4REV1,
            CapabilityKind.STARTTLS,
            CapabilityKind.IDLE,
            CapabilityKind.MAILBOX_REFERRALS,
            CapabilityKind.LOGIN_REFERRALS,
            CapabilityKind.SASL_IR,
            CapabilityKind.ENABLE,
        )
    }

    #######################################################################
    #
    def __init__(self, data: bytes, complete: bool = False):
        if type(self) is IMAPParser:
            raise TypeError(
                "IMAPParser is a base class, use ResponseParser or CommandParser"
            )
        self.log = logging.getLogger(
            "%s.%s" % (__name__, self.__class__.__name__)
        )
        self.data = bytes(data)
        self.pos = 0
        self.complete = complete

    #######################################################################
    #
    def __repr__(self):
        return "<%s at %d of %d bytes>" % (
            self.__class__.__name__,
            self.pos,
            len(self.data),
        )

    #######################################################################
    #
    @property
    def remainder(self) -> bytes:
        return self.data[self.pos :]

    #######################################################################
    #
    def parse(self, rule: Optional[str] = None) -> Tuple[Any, bytes]:
        """
        Run the grammar rule named `rule` (the ABNF name, ie: "nz-number",
        "resource-name", "response") at the start of our buffer.

        Returns a tuple of the decoded value and the unconsumed remainder.
        Raises `Incomplete` or `BadSyntax`.
        """
        rule = rule if rule is not None else self.start_rule
        if rule is None:
            raise ValueError("no grammar rule to parse")
        method = getattr(self, "_p_%s" % rule.replace("-", "_"), None)
        if method is None:
            raise ValueError("unknown grammar rule '%s'" % rule)

        self.pos = 0
        try:
            value = method()
        except Incomplete as exc:
            self.log.debug("%s: incomplete: %s", rule, exc)
            raise
        except BadSyntax as exc:
            self.log.debug("%s: %s, input: %r", rule, exc, self.data[:80])
            raise
        self.log.debug("%s: %r", rule, value)
        return value, self.remainder

    #######################################################################
    #######################################################################
    #
    # Combinators. These run other rules and rewind the cursor when an
    # alternative does not match.
    #

    #######################################################################
    #
    def _p_alt(self, *funcs: Callable[[], Any]) -> Any:
        """
        Ordered alternation. Try each function in turn from the same spot,
        returning the first success. Only `NoMatch` moves on to the next
        alternative; `Incomplete` and hard `BadSyntax` are raised at once.

        If nothing matches we raise the `NoMatch` that got furthest in to
        the input since that is the most informative one.
        """
        start = self.pos
        furthest: Optional[NoMatch] = None
        for func in funcs:
            try:
                return func()
            except NoMatch as exc:
                if furthest is None or (exc.position or 0) >= (
                    furthest.position or 0
                ):
                    furthest = exc
                self.pos = start
        assert furthest is not None
        raise furthest

    #######################################################################
    #
    def _p_opt(self, func: Callable[[], Any]) -> Any:
        """
        Run `func`, returning None (and swallowing nothing) if it does not
        match.
        """
        start = self.pos
        try:
            return func()
        except NoMatch:
            self.pos = start
            return None

    #######################################################################
    #
    def _p_list_of(
        self, func: Callable[[], Any], separator: str = " "
    ) -> List[Any]:
        """
        elem *(separator elem)

        The list MUST have at least one element. If what follows a separator
        is not an element the separator is not swallowed and the list ends
        before it.
        """
        result = [func()]
        result.extend(self._p_preceded_list_of(func, separator))
        return result

    #######################################################################
    #
    def _p_preceded_list_of(
        self, func: Callable[[], Any], separator: str = " "
    ) -> List[Any]:
        """
        *(separator elem)
        """
        result = []
        while True:
            start = self.pos
            if self._p_simple_string(separator, silent=True) is None:
                break
            try:
                result.append(func())
            except NoMatch:
                self.pos = start
                break
        return result

    #######################################################################
    #
    def _p_paren_list_of(
        self, func: Callable[[], Any], nonempty: bool = False
    ) -> List[Any]:
        """
        We expect the input stream to be '('<list of elements>')' where the
        elements are separated by a single space. There are no spaces
        between the parentheses and the first and last element.

        If `nonempty` is True '()' does not match.
        """
        result = []
        self._p_simple_string(
            "(", syntax_error="expected a '(' beginning a parenthesized list"
        )
        start = self.pos
        if self._p_simple_string(")", silent=True) is not None:
            if nonempty:
                raise NoMatch(
                    "expected at least one element in the list", start
                )
            return result

        while True:
            result.append(func())
            if self._p_simple_string(")", silent=True) is not None:
                break
            self._p_sp()
        return result

    #######################################################################
    #######################################################################
    #
    # Lexical primitives.
    #

    #######################################################################
    #
    def _peekc(self) -> Optional[int]:
        """
        The next byte without swallowing it. At the end of the buffer it is
        None when the unit is complete, otherwise more input is needed.
        """
        if self.pos < len(self.data):
            return self.data[self.pos]
        if self.complete:
            return None
        raise Incomplete("expected more input", position=self.pos)

    #######################################################################
    #
    def _p_re(
        self, regexp, silent=False, swallow=True, group=0, syntax_error=None
    ) -> Optional[str]:
        """
        Match the token regular expression `regexp` at the cursor and return
        what matched as a string.

        A match that runs in to the end of the buffer might be the prefix of
        a longer token so unless the unit is complete that is `Incomplete`,
        as is an empty buffer. If it does not match we raise `NoMatch`, or
        return None if `silent` is True.

        NOTE: If the match fails then we do NOT swallow any input even if
              swallow = True
        """
        match = regexp.match(self.data, self.pos)
        if not self.complete and (
            self.pos >= len(self.data)
            or (match is not None and match.end() >= len(self.data))
        ):
            raise Incomplete(
                syntax_error or "token %s" % regexp.pattern, position=self.pos
            )
        if match is None:
            if silent:
                return None
            raise NoMatch(
                syntax_error or "No match for r.e. '%s'" % regexp.pattern,
                self.pos,
            )
        if swallow:
            self.pos = match.end()
        return match.group(group).decode("ascii")

    #######################################################################
    #
    def _p_simple_string(
        self,
        string: str,
        silent=False,
        swallow=True,
        case_matters=False,
        syntax_error=None,
    ) -> Optional[str]:
        """
        Like _p_re(), but for a fixed string. If the buffer ends part way in
        to the string the input is incomplete.

        If 'case_matters' is False the returned string is forced to lower case.

        If we do not match, then input is not swallowed even if swallow = True.
        """
        want = string.encode("ascii")
        have = self.data[self.pos : self.pos + len(want)]
        if not case_matters:
            want = want.lower()
            have = have.lower()

        match = None
        if have == want:
            match = string if case_matters else string.lower()
        elif len(have) < len(want) and want.startswith(have):
            if not self.complete:
                raise Incomplete(
                    "expected '%s'" % string, position=self.pos + len(have)
                )

        if match is None:
            if silent:
                return None
            raise NoMatch(
                syntax_error
                or "No match for simple string '%s', input started with: %r"
                % (string, self.data[self.pos : self.pos + 10]),
                self.pos,
            )
        if swallow:
            self.pos += len(want)
        return match

    #######################################################################
    #
    def _p_sp(self):
        self._p_simple_string(" ", syntax_error="expected a space")

    #######################################################################
    #
    def _p_crlf(self):
        """
        Lines end in CRLF, but we are relaxed and also accept a bare LF.
        """
        if self._p_simple_string("\n", silent=True) is not None:
            return
        self._p_simple_string("\r\n", syntax_error="expected end of line")

    #######################################################################
    #
    def _p_keyword(self, keyword: str) -> str:
        """
        Swallow an atom that is (case insensitively) `keyword`. The whole
        atom is consumed before it is compared so a keyword never matches
        the front of a longer atom.
        """
        start = self.pos
        atom = self._p_atom()
        if atom.lower() != keyword.lower():
            self.pos = start
            raise NoMatch("expected '%s', got '%s'" % (keyword, atom), start)
        return atom

    #######################################################################
    #
    def _p_atom(self, swallow=True) -> str:
        return self._p_re(_atom_re, swallow=swallow, syntax_error="expected an atom")

    #######################################################################
    #
    def _p_tag(self) -> str:
        return self._p_re(_tag_re, syntax_error="expected a tag")

    #######################################################################
    #
    def _p_text(self) -> str:
        """text = 1*TEXT-CHAR"""
        return self._p_re(_text_re, syntax_error="expected text")

    #######################################################################
    #
    def _p_base64(self) -> str:
        start = self.pos
        value = self._p_re(_base64_re, syntax_error="expected base64 data")
        if len(value) % 4 != 0:
            self.pos = start
            raise NoMatch("base64 data must be a multiple of 4 long", start)
        return value

    #######################################################################
    #
    def _to_int(self, digits: str, limit: int, start: int) -> int:
        """
        The value of a run of digits that may be no larger than `limit`.
        The length is checked before converting, int() refuses very long
        strings.
        """
        significant = digits.lstrip("0") or "0"
        if len(significant) > len(str(limit)) or int(significant) > limit:
            raise BadSyntax(
                "number %.24s%s is larger than %d"
                % (digits, "..." if len(digits) > 24 else "", limit),
                start,
            )
        return int(significant)

    #######################################################################
    #
    def _p_digits(self, limit: int, syntax_error: str) -> int:
        """
        1*DIGIT no larger than `limit`.

        A run of digits that is already too large is invalid even if it
        runs in to the end of the buffer: more digits can only make it
        larger.
        """
        start = self.pos
        match = _number_re.match(self.data, self.pos)
        if match is not None:
            self._to_int(match.group().decode("ascii"), limit, start)
        return self._to_int(
            self._p_re(_number_re, syntax_error=syntax_error), limit, start
        )

    #######################################################################
    #
    def _p_number(self) -> int:
        """number = 1*DIGIT ; unsigned 32-bit integer"""
        return self._p_digits(MAX_NUMBER, "expected a number")

    #######################################################################
    #
    def _p_nz_number(self) -> int:
        """nz-number = digit-nz *DIGIT ; non-zero unsigned 32-bit integer"""
        start = self.pos
        c = self._peekc()
        if c is None or c not in _nz_digits:
            raise NoMatch("expected a non-zero number", start)
        return self._p_digits(MAX_NUMBER, "expected a non-zero number")

    #######################################################################
    #
    def _p_number64(self) -> int:
        """number64 = 1*DIGIT ; unsigned 63-bit integer in RFC 9208, we take
        the whole unsigned 64-bit range"""
        return self._p_digits(MAX_NUMBER64, "expected a number")

    #######################################################################
    #
    def _p_quoted(self) -> bytes:
        """
        quoted = DQUOTE *QUOTED-CHAR DQUOTE

        QUOTED-CHAR is any TEXT-CHAR except quoted-specials, unless they are
        escaped with a '\\'.
        """
        self._p_simple_string(
            '"', case_matters=True, syntax_error="expected a quoted string"
        )
        result = bytearray()
        while True:
            c = self._peekc()
            if c is None:
                raise NoMatch("unterminated quoted string", self.pos)
            if c == 0x22:  # '"'
                self.pos += 1
                return bytes(result)
            if c == 0x5C:  # '\'
                self.pos += 1
                c = self._peekc()
                if c is None or c not in b'"\\':
                    raise NoMatch("invalid escape in quoted string", self.pos)
            elif c in (0x00, 0x0A, 0x0D) or c > 0x7F:
                raise NoMatch("invalid character in quoted string", self.pos)
            result.append(c)
            self.pos += 1

    #######################################################################
    #
    def _p_literal(self) -> bytes:
        """
        literal = "{" number "}" CRLF *CHAR8

        The number is the count of bytes that follow the CRLF. If we do not
        have all of them yet the `Incomplete` we raise says how many more we
        need.
        """
        self._p_simple_string("{", syntax_error="expected a literal")
        length = self._p_digits(MAX_NUMBER, "expected literal length")
        if self.allow_literal_plus:
            self._p_simple_string("+", silent=True)
        self._p_simple_string(
            "}", syntax_error="expected '}' after the literal length"
        )
        self._p_crlf()

        available = len(self.data) - self.pos
        if length > available:
            if self.complete:
                raise BadSyntax(
                    "Remaining input %d bytes long, expected at least %d"
                    % (available, length),
                    self.pos,
                )
            raise Incomplete(
                "literal of %d bytes" % length,
                needed=length - available,
                position=self.pos,
            )
        value = self.data[self.pos : self.pos + length]
        if b"\x00" in value:
            raise BadSyntax("literal contains a NUL", self.pos)
        self.pos += length
        return value

    #######################################################################
    #
    def _p_string(self) -> bytes:
        """A string is either a 'quoted string' or a 'literal string'"""
        c = self._peekc()
        if c == 0x22:  # '"'
            return self._p_quoted()
        if c == 0x7B:  # '{'
            return self._p_literal()
        raise NoMatch("expected a quoted string or a literal", self.pos)

    #######################################################################
    #
    def _p_astring(self) -> str:
        """an 'astring' is 1*ASTRING-CHAR or a 'string'"""
        atom = self._p_re(_astring_atom_re, silent=True)
        if atom is not None:
            return atom
        return self._p_string().decode("utf-8", errors="replace")

    #######################################################################
    #
    def _p_nil(self) -> None:
        self._p_simple_string("nil", syntax_error="expected NIL")
        return None

    #######################################################################
    #
    def _p_nstring(self) -> Optional[bytes]:
        """nstring = string / nil"""
        c = self._peekc()
        if c in (0x22, 0x7B):
            return self._p_string()
        return self._p_nil()

    #######################################################################
    #
    def _p_charset(self) -> str:
        """charset = atom / quoted"""
        if self._peekc() == 0x22:
            return self._p_quoted().decode("ascii")
        return self._p_atom()

    #######################################################################
    #
    def _p_auth_type(self) -> str:
        """auth-type = atom"""
        return self._p_atom()

    #######################################################################
    #
    def _p_mailbox(self) -> str:
        """mailbox ::= 'INBOX' / astring

        INBOX is case-insensitive.  All case variants of INBOX (e.g. 'iNbOx')
        MUST be interpreted as INBOX not as an astring. We parse the astring
        first and compare after, so "INBOXES" is not mistaken for INBOX.
        """
        mbox_name = self._p_astring()
        if mbox_name.lower() == "inbox":
            return "INBOX"
        return mbox_name

    #######################################################################
    #
    def _p_list_mailbox(self) -> str:
        """list_mailbox   ::= 1*(ATOM_CHAR / list_wildcards) / string
        list_wildcards ::= '%' / '*'
        """
        list_mailbox = self._p_re(_list_mailbox_re, silent=True)
        if list_mailbox is None:
            list_mailbox = self._p_string().decode("utf-8", errors="replace")
        return list_mailbox

    #######################################################################
    #
    def _p_flag(self) -> str:
        r"""flag ::= "\Answered" / "\Flagged" / "\Deleted" /
                 "\Seen" / "\Draft" / flag_keyword / flag_extension

        What that above is saying is that a flag is an atom or a "\"
        followed by an atom. Which flags are valid is context dependent and
        we do not know that when parsing."""
        flag = ""
        if self._p_simple_string("\\", silent=True) is not None:
            flag = "\\"
        return flag + self._p_atom()

    #######################################################################
    #
    def _p_flag_perm(self) -> str:
        r"""flag-perm = flag / "\*" """
        if self._p_simple_string("\\*", silent=True) is not None:
            return "\\*"
        return self._p_flag()

    #######################################################################
    #
    def _p_flag_list(self) -> Tuple[str, ...]:
        """flag-list = "(" [flag *(SP flag)] ")" """
        return tuple(self._p_paren_list_of(self._p_flag))

    #######################################################################
    #
    def _p_date_time(self) -> datetime:
        """date_time ::= <"> date_day_fixed "-" date_month "-" date_year
                         SPACE time SPACE zone <">

        The return is a timezone aware datetime object."""
        start = self.pos
        date_time = self._p_quoted().decode("ascii")
        match = _date_time_re.fullmatch(date_time)
        if match is None or match.group("month").lower() not in _month:
            raise NoMatch("expected a date-time, got '%s'" % date_time, start)

        offset = int(match.group("tz_hr")) * 60 + int(match.group("tz_min"))
        if match.group("tz_sign") == "-":
            offset = -offset
        try:
            return datetime(
                int(match.group("year")),
                _month[match.group("month").lower()],
                int(match.group("day")),
                int(match.group("hour")),
                int(match.group("min")),
                int(match.group("sec")),
                tzinfo=pytz.FixedOffset(offset),
            )
        except ValueError as exc:
            raise BadSyntax("invalid date-time '%s': %s" % (date_time, exc), start)

    #######################################################################
    #
    def _p_status_att(self) -> StatusAttribute:
        """status-att = "MESSAGES" / "RECENT" / "UIDNEXT" / "UIDVALIDITY" /
                        "UNSEEN"
        """
        start = self.pos
        atom = self._p_atom()
        att = STR_TO_STATUS_ATTRIBUTE.get(atom.lower())
        if att is None:
            self.pos = start
            raise NoMatch("unknown status attribute '%s'" % atom, start)
        return att

    #######################################################################
    #######################################################################
    #
    # Sequence sets.
    #

    #######################################################################
    #
    def _p_sequence_set(self) -> Tuple:
        """sequence-set = (seq-number / seq-range) ["," sequence-set]

        Identifies a set of messages. The set is returned exactly as it was
        written: we do not sort it, drop duplicates or merge overlapping
        ranges. That is up to whoever uses it.

        At every position a range is tried before a single number, otherwise
        the single number would match the first half of a range and leave
        the ':' behind.
        """
        return tuple(
            self._p_list_of(
                lambda: self._p_alt(self._p_seq_range, self._p_seq_single),
                separator=",",
            )
        )

    #######################################################################
    #
    def _p_seq_range(self) -> SeqRange:
        """seq-range = seq-number ":" seq-number

        2:4 and 4:2 are both valid and are kept as written.
        """
        start = self._p_seq_number()
        self._p_simple_string(":", syntax_error="expected ':' in a range")
        return SeqRange(start, self._p_seq_number())

    #######################################################################
    #
    def _p_seq_single(self) -> SeqSingle:
        return SeqSingle(self._p_seq_number())

    #######################################################################
    #
    def _p_seq_number(self) -> SeqNo:
        """seq-number = nz-number / "*"

        * is the largest number in use.
        """
        if self._p_simple_string("*", silent=True) is not None:
            return UNLIMITED
        return SeqNo(self._p_nz_number())

    #######################################################################
    #######################################################################
    #
    # Capabilities.
    #

    #######################################################################
    #
    def _p_capability(self) -> Capability:
        """capability = ("AUTH=" auth-type) / atom"""
        return self._p_alt(self._p_capability_auth, self._p_capability_atom)

    #######################################################################
    #
    def _p_capability_auth(self) -> Capability:
        self._p_simple_string("auth=")
        return Capability(CapabilityKind.AUTH, self._p_auth_type().upper())

    #######################################################################
    #
    def _p_capability_atom(self) -> Capability:
        return self._classify_capability(self._p_atom())

    #######################################################################
    #
    def _classify_capability(self, atom: str) -> Capability:
        """
        Turn an already swallowed atom in to a Capability.

        Extensions whose capabilities look like atoms (QUOTA, QUOTASET,
        QUOTA=RES-STORAGE) override this and call super() for what they do
        not recognize. They must not be tried as grammar alternatives before
        the atom: the atom is greedy and would swallow an extension's
        suffix leaving an unknown capability and leftover bytes.
        """
        kind = self.capability_keywords.get(atom.lower())
        if kind is not None:
            return Capability(kind)
        return Capability(CapabilityKind.OTHER, atom)

    #######################################################################
    #
    def _p_capability_list(self) -> Tuple[Capability, ...]:
        """SP capability *(SP capability)"""
        self._p_sp()
        return tuple(self._p_list_of(self._p_capability))

    #######################################################################
    #
    def _p_capability_data(self) -> Tuple[Capability, ...]:
        """capability-data = "CAPABILITY" *(SP capability) SP "IMAP4rev1"
                             *(SP capability)
        """
        start = self.pos
        self._p_keyword("capability")
        capabilities = self._p_capability_list()
        self._verify_capability_data(capabilities, start)
        return capabilities

    #######################################################################
    #
    def _verify_capability_data(
        self, capabilities: Tuple[Capability, ...], start: int
    ):
        """
        A capability list must include IMAP4rev1. Until the list is
        terminated more capabilities could still arrive, so this is only
        called once the terminator has been seen, and then it is a hard
        failure.
        """
        if IMAP4REV1 not in capabilities:
            raise BadSyntax("capability list does not include IMAP4rev1", start)
