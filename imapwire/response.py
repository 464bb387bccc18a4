#!/usr/bin/env python
#
# File: $Id$
#
"""
The grammar of what an IMAP server sends: the greeting, continuation
requests, untagged data and the status responses that complete commands.

Untagged data, response codes and FETCH attributes all start with a keyword.
The keyword is read as a whole atom first and then used to find the rule
that parses the rest, ie: "* FLAGS (...)" runs `_p_data_flags()` and
"[UIDNEXT 4]" runs `_p_code_uidnext()`. Extensions add rules by defining
methods with those names.
"""

# system imports
#
import re
from typing import Callable, Optional, Tuple

# imapwire imports
#
from .exceptions import NoMatch
from .parse import IMAPParser, rule_method_name
from .quota import QuotaResponseMixin
from .types import (
    STR_TO_STATUS_KIND,
    Address,
    CapabilityData,
    Code,
    CodeKind,
    Continuation,
    EnabledData,
    Envelope,
    ExistsData,
    ExpungeData,
    FetchData,
    FlagsData,
    ListData,
    RecentData,
    Response,
    SearchData,
    Status,
    StatusAttribute,
    StatusData,
    StatusKind,
)

# The parameter of an unknown response code is TEXT-CHARs except "]".
#
_code_text_re = re.compile(rb"[\x01-\x09\x0b\x0c\x0e-\x5c\x5e-\x7f]+")

# A BODY section is the same, but may be empty: BODY[]
#
_section_re = re.compile(rb"[\x01-\x09\x0b\x0c\x0e-\x5c\x5e-\x7f]*")

_fetch_att_re = re.compile(rb"[A-Za-z0-9.]+")

# The status keywords a command completion may have.
#
STATE_STATUS = (StatusKind.OK, StatusKind.NO, StatusKind.BAD)


##################################################################
##################################################################
#
class ResponseParser(QuotaResponseMixin, IMAPParser):
    """
    Parse one response line (and any literals in it) from an IMAP server.
    """

    start_rule = "response"

    ##################################################################
    #
    def _p_greeting(self) -> Status:
        """greeting = "*" SP (resp-cond-auth / resp-cond-bye) CRLF"""
        self._p_simple_string("*", syntax_error="expected '*' greeting")
        self._p_sp()
        kind, code, text = self._p_alt(
            self._p_resp_cond_auth, self._p_resp_cond_bye
        )
        self._p_crlf()
        return Status(kind, text, code=code)

    ##################################################################
    #
    def _p_response(self) -> Response:
        """
        response = continue-req / response-data / response-done

        One line from the server. The alternatives are tried in this order.
        An untagged BYE is matched as response-data and gives the same
        value response-fatal would.
        """
        return self._p_alt(
            self._p_continue_req, self._p_response_data, self._p_response_done
        )

    ##################################################################
    #
    def _p_continue_req(self) -> Continuation:
        """continue-req = "+" SP (resp-text / base64) CRLF"""
        self._p_simple_string("+", syntax_error="expected '+'")
        self._p_sp()
        result = self._p_alt(self._p_continue_text, self._p_continue_base64)
        self._p_crlf()
        return result

    ##################################################################
    #
    def _p_continue_text(self) -> Continuation:
        code, text = self._p_resp_text()
        return Continuation(text=text, code=code)

    ##################################################################
    #
    def _p_continue_base64(self) -> Continuation:
        return Continuation(base64=self._p_base64())

    ##################################################################
    #
    def _p_response_data(self):
        """
        response-data = "*" SP (resp-cond-state / resp-cond-bye /
                        mailbox-data / message-data / capability-data /
                        enable-data) CRLF

        Data that starts with a number (EXISTS, RECENT, EXPUNGE, FETCH) is
        dispatched on the keyword after the number.
        """
        self._p_simple_string("*", syntax_error="expected '*' untagged response")
        self._p_sp()
        start = self.pos
        c = self._peekc()
        if c is not None and c in b"0123456789":
            response = self._p_message_data()
        else:
            response = self._dispatch("_p_data_", start)()
        self._p_crlf()
        if isinstance(response, CapabilityData):
            self._verify_capability_data(response.capabilities, start)
        return response

    ##################################################################
    #
    def _p_response_done(self) -> Status:
        """response-done = response-tagged / response-fatal"""
        return self._p_alt(self._p_response_tagged, self._p_response_fatal)

    ##################################################################
    #
    def _p_response_tagged(self) -> Status:
        """response-tagged = tag SP resp-cond-state CRLF"""
        tag = self._p_tag()
        self._p_sp()
        kind, code, text = self._p_resp_cond_state()
        self._p_crlf()
        return Status(kind, text, tag=tag, code=code)

    ##################################################################
    #
    def _p_response_fatal(self) -> Status:
        """response-fatal = "*" SP resp-cond-bye CRLF"""
        self._p_simple_string("*", syntax_error="expected '*'")
        self._p_sp()
        kind, code, text = self._p_resp_cond_bye()
        self._p_crlf()
        return Status(kind, text, code=code)

    ##################################################################
    #
    def _dispatch(self, prefix: str, start: int) -> Callable:
        """
        Peek at the keyword at the cursor and return the rule for it. The
        rule swallows the keyword itself.
        """
        keyword = self._p_atom(swallow=False)
        name = rule_method_name(prefix, keyword)
        rule = getattr(self, name, None) if name else None
        if rule is None:
            raise NoMatch("unknown response '%s'" % keyword, start)
        return rule

    ##################################################################
    ##################################################################
    #
    # Status responses
    #

    ##################################################################
    #
    def _p_status_keyword(self, kinds: Tuple[StatusKind, ...]) -> StatusKind:
        """
        One of the status keywords in `kinds`, in any case. The keyword
        itself is not kept.
        """
        start = self.pos
        atom = self._p_atom()
        kind = STR_TO_STATUS_KIND.get(atom.lower())
        if kind not in kinds:
            self.pos = start
            raise NoMatch(
                "expected one of %s, got '%s'"
                % (", ".join(k.name for k in kinds), atom),
                start,
            )
        return kind

    ##################################################################
    #
    def _p_resp_cond(self, kinds: Tuple[StatusKind, ...]):
        kind = self._p_status_keyword(kinds)
        self._p_sp()
        code, text = self._p_resp_text()
        return kind, code, text

    ##################################################################
    #
    def _p_resp_cond_auth(self):
        """resp-cond-auth = ("OK" / "PREAUTH") SP resp-text"""
        return self._p_resp_cond((StatusKind.OK, StatusKind.PREAUTH))

    ##################################################################
    #
    def _p_resp_cond_bye(self):
        """resp-cond-bye = "BYE" SP resp-text"""
        return self._p_resp_cond((StatusKind.BYE,))

    ##################################################################
    #
    def _p_resp_cond_state(self):
        """resp-cond-state = ("OK" / "NO" / "BAD") SP resp-text"""
        return self._p_resp_cond(STATE_STATUS)

    ##################################################################
    #
    def _p_data_ok(self) -> Status:
        kind, code, text = self._p_resp_cond_state()
        return Status(kind, text, code=code)

    _p_data_no = _p_data_ok
    _p_data_bad = _p_data_ok

    ##################################################################
    #
    def _p_data_bye(self) -> Status:
        kind, code, text = self._p_resp_cond_bye()
        return Status(kind, text, code=code)

    ##################################################################
    #
    def _p_resp_text(self) -> Tuple[Optional[Code], str]:
        """resp-text = ["[" resp-text-code "]" SP] text"""
        code = self._p_opt(self._p_bracketed_code)
        return code, self._p_text()

    ##################################################################
    #
    def _p_bracketed_code(self) -> Code:
        self._p_simple_string("[", syntax_error="expected '['")
        code = self._p_resp_text_code()
        self._p_simple_string("]", syntax_error="expected ']' after code")
        self._p_sp()
        return code

    ##################################################################
    ##################################################################
    #
    # Response codes
    #

    ##################################################################
    #
    def _p_resp_text_code(self) -> Code:
        """
        resp-text-code = "ALERT" / "BADCHARSET" [SP "(" charset
                         *(SP charset) ")" ] / capability-data / "PARSE" /
                         "PERMANENTFLAGS" SP "(" [flag-perm *(SP flag-perm)]
                         ")" / "READ-ONLY" / "READ-WRITE" / "TRYCREATE" /
                         "UIDNEXT" SP nz-number / "UIDVALIDITY" SP
                         nz-number / "UNSEEN" SP nz-number /
                         atom [SP 1*<any TEXT-CHAR except "]">]

        The atom is read first and the rest of the code is parsed by the
        rule for that atom. If there is no such rule, or its arguments do
        not parse, it is an OTHER code.
        """
        start = self.pos
        atom = self._p_atom()
        name = rule_method_name("_p_code_", atom)
        rule = getattr(self, name, None) if name else None
        if rule is not None:
            after = self.pos
            try:
                code = rule()
                self._p_simple_string("]", swallow=False)
                if code.kind is CodeKind.CAPABILITY:
                    self._verify_capability_data(code.value, start)
                return code
            except NoMatch:
                self.pos = after

        text = None
        if self._p_simple_string(" ", silent=True) is not None:
            text = self._p_re(_code_text_re, syntax_error="expected code text")
        return Code(CodeKind.OTHER, atom=atom, text=text)

    ##################################################################
    #
    def _p_code_alert(self) -> Code:
        return Code(CodeKind.ALERT)

    def _p_code_parse(self) -> Code:
        return Code(CodeKind.PARSE)

    def _p_code_read_only(self) -> Code:
        return Code(CodeKind.READ_ONLY)

    def _p_code_read_write(self) -> Code:
        return Code(CodeKind.READ_WRITE)

    def _p_code_trycreate(self) -> Code:
        return Code(CodeKind.TRYCREATE)

    ##################################################################
    #
    def _p_code_badcharset(self) -> Code:
        charsets = ()
        if self._p_simple_string(" ", silent=True) is not None:
            charsets = tuple(
                self._p_paren_list_of(self._p_charset, nonempty=True)
            )
        return Code(CodeKind.BADCHARSET, charsets)

    ##################################################################
    #
    def _p_code_capability(self) -> Code:
        return Code(CodeKind.CAPABILITY, self._p_capability_list())

    ##################################################################
    #
    def _p_code_permanentflags(self) -> Code:
        self._p_sp()
        return Code(
            CodeKind.PERMANENTFLAGS,
            tuple(self._p_paren_list_of(self._p_flag_perm)),
        )

    ##################################################################
    #
    def _p_code_uidnext(self) -> Code:
        self._p_sp()
        return Code(CodeKind.UIDNEXT, self._p_nz_number())

    def _p_code_uidvalidity(self) -> Code:
        self._p_sp()
        return Code(CodeKind.UIDVALIDITY, self._p_nz_number())

    def _p_code_unseen(self) -> Code:
        self._p_sp()
        return Code(CodeKind.UNSEEN, self._p_nz_number())

    ##################################################################
    ##################################################################
    #
    # Untagged data
    #

    ##################################################################
    #
    def _p_data_capability(self) -> CapabilityData:
        """
        capability-data = "CAPABILITY" *(SP capability) SP "IMAP4rev1"
                          *(SP capability)

        IMAP4rev1 being present is checked by response-data once the line
        is complete.
        """
        self._p_keyword("capability")
        return CapabilityData(self._p_capability_list())

    ##################################################################
    #
    def _p_data_enabled(self) -> EnabledData:
        """enable-data = "ENABLED" *(SP capability)"""
        self._p_keyword("enabled")
        return EnabledData(tuple(self._p_preceded_list_of(self._p_capability)))

    ##################################################################
    #
    def _p_data_flags(self) -> FlagsData:
        """"FLAGS" SP flag-list"""
        self._p_keyword("flags")
        self._p_sp()
        return FlagsData(self._p_flag_list())

    ##################################################################
    #
    def _p_data_list(self) -> ListData:
        """"LIST" SP mailbox-list / "LSUB" SP mailbox-list"""
        command = self._p_atom().upper()
        self._p_sp()
        return self._p_mailbox_list(command)

    _p_data_lsub = _p_data_list

    ##################################################################
    #
    def _p_mailbox_list(self, command: str = "LIST") -> ListData:
        """mailbox-list = "(" [mbx-list-flags] ")" SP
                          (DQUOTE QUOTED-CHAR DQUOTE / nil) SP mailbox
        """
        attributes = tuple(self._p_paren_list_of(self._p_flag))
        self._p_sp()
        delimiter = None
        if self._peekc() == 0x22:  # '"'
            start = self.pos
            delimiter = self._p_quoted().decode("ascii")
            if len(delimiter) != 1:
                raise NoMatch("hierarchy delimiter must be one character", start)
        else:
            self._p_nil()
        self._p_sp()
        return ListData(command, attributes, delimiter, self._p_mailbox())

    ##################################################################
    #
    def _p_data_search(self) -> SearchData:
        """"SEARCH" *(SP nz-number)"""
        self._p_keyword("search")
        return SearchData(tuple(self._p_preceded_list_of(self._p_nz_number)))

    ##################################################################
    #
    def _p_data_status(self) -> StatusData:
        """"STATUS" SP mailbox SP "(" [status-att-list] ")"
        """
        self._p_keyword("status")
        self._p_sp()
        mailbox = self._p_mailbox()
        self._p_sp()
        return StatusData(
            mailbox, tuple(self._p_paren_list_of(self._p_status_att_value))
        )

    ##################################################################
    #
    def _p_status_att_value(self) -> Tuple[StatusAttribute, int]:
        att = self._p_status_att()
        self._p_sp()
        return att, self._p_number()

    ##################################################################
    #
    def _p_message_data(self):
        """
        number SP "EXISTS" / number SP "RECENT" /
        nz-number SP "EXPUNGE" / nz-number SP "FETCH" SP msg-att
        """
        number = self._p_number()
        self._p_sp()
        rule = self._dispatch("_p_numbered_", self.pos)
        return rule(number)

    ##################################################################
    #
    def _p_numbered_exists(self, number: int) -> ExistsData:
        self._p_keyword("exists")
        return ExistsData(number)

    ##################################################################
    #
    def _p_numbered_recent(self, number: int) -> RecentData:
        self._p_keyword("recent")
        return RecentData(number)

    ##################################################################
    #
    def _p_numbered_expunge(self, number: int) -> ExpungeData:
        start = self.pos
        self._p_keyword("expunge")
        if number == 0:
            raise NoMatch("message sequence numbers start at 1", start)
        return ExpungeData(number)

    ##################################################################
    #
    def _p_numbered_fetch(self, number: int) -> FetchData:
        start = self.pos
        self._p_keyword("fetch")
        if number == 0:
            raise NoMatch("message sequence numbers start at 1", start)
        self._p_sp()
        return FetchData(
            number, tuple(self._p_paren_list_of(self._p_msg_att, nonempty=True))
        )

    ##################################################################
    ##################################################################
    #
    # FETCH attributes
    #

    ##################################################################
    #
    def _p_msg_att(self):
        """
        msg-att-dynamic / msg-att-static: a (NAME, value) tuple.

        BODY[<section>]<<origin>> keeps its section and origin in the name.
        """
        start = self.pos
        name = self._p_re(_fetch_att_re, syntax_error="expected a FETCH attribute")
        name = name.upper()
        match name:
            case "FLAGS":
                self._p_sp()
                value = self._p_flag_list()
            case "UID":
                self._p_sp()
                value = self._p_nz_number()
            case "RFC822.SIZE":
                self._p_sp()
                value = self._p_number()
            case "INTERNALDATE":
                self._p_sp()
                value = self._p_date_time()
            case "ENVELOPE":
                self._p_sp()
                value = self._p_envelope()
            case "RFC822" | "RFC822.HEADER" | "RFC822.TEXT":
                self._p_sp()
                value = self._p_nstring()
            case "BODY":
                self._p_simple_string("[", syntax_error="expected BODY[")
                section = self._p_re(_section_re, syntax_error="expected a section")
                self._p_simple_string("]", syntax_error="expected ']'")
                name = "BODY[%s]" % section.upper()
                if self._p_simple_string("<", silent=True) is not None:
                    name += "<%d>" % self._p_number()
                    self._p_simple_string(">", syntax_error="expected '>'")
                self._p_sp()
                value = self._p_nstring()
            case _:
                raise NoMatch("unsupported FETCH attribute '%s'" % name, start)
        return name, value

    ##################################################################
    #
    def _p_envelope(self) -> Envelope:
        """envelope = "(" env-date SP env-subject SP env-from SP
                      env-sender SP env-reply-to SP env-to SP env-cc SP
                      env-bcc SP env-in-reply-to SP env-message-id ")"
        """
        self._p_simple_string("(", syntax_error="expected '(' for envelope")
        date = self._p_nstring()
        self._p_sp()
        subject = self._p_nstring()
        addresses = []
        for _ in range(6):
            self._p_sp()
            addresses.append(self._p_env_addresses())
        self._p_sp()
        in_reply_to = self._p_nstring()
        self._p_sp()
        message_id = self._p_nstring()
        self._p_simple_string(")", syntax_error="expected ')' ending envelope")
        return Envelope(date, subject, *addresses, in_reply_to, message_id)

    ##################################################################
    #
    def _p_env_addresses(self) -> Optional[Tuple[Address, ...]]:
        """"(" 1*address ")" / nil"""
        if self._peekc() != 0x28:  # '('
            return self._p_nil()
        self._p_simple_string("(")
        result = [self._p_address()]
        while self._p_simple_string(")", silent=True) is None:
            result.append(self._p_address())
        return tuple(result)

    ##################################################################
    #
    def _p_address(self) -> Address:
        """address = "(" addr-name SP addr-adl SP addr-mailbox SP
                     addr-host ")"
        """
        self._p_simple_string("(", syntax_error="expected '(' for address")
        name = self._p_nstring()
        self._p_sp()
        adl = self._p_nstring()
        self._p_sp()
        mailbox = self._p_nstring()
        self._p_sp()
        host = self._p_nstring()
        self._p_simple_string(")", syntax_error="expected ')' ending address")
        return Address(name, adl, mailbox, host)


####################################################################
#
def parse_greeting(data: bytes, complete: bool = False):
    """
    Parse the line a server sends when a client connects. Returns a tuple
    of the `Status` and the unconsumed remainder.
    """
    return ResponseParser(data, complete).parse("greeting")


####################################################################
#
def parse_response(data: bytes, complete: bool = False):
    """
    Parse one response from a server. Returns a tuple of the response and
    the unconsumed remainder.
    """
    return ResponseParser(data, complete).parse("response")
