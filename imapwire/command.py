#!/usr/bin/env python
#
# File: $Id$
#
"""
The grammar of what an IMAP client sends.

A command is a tag, the command name and its arguments. The name is read as
an atom and the rule that parses the arguments is found by name, ie:
"SELECT" runs `_p_cmd_select()`. Extensions add commands by defining more
`_p_cmd_<name>` methods.
"""

# system imports
#
from typing import Tuple

# imapwire imports
#
from .exceptions import NoMatch, UnknownCommand
from .parse import IMAPParser, rule_method_name
from .quota import QuotaCommandMixin
from .types import (
    Authenticate,
    Command,
    CommandBody,
    Copy,
    Enable,
    ListCommand,
    Login,
    MailboxCommand,
    Rename,
    SimpleCommand,
    StatusCommand,
    Store,
    StoreAction,
    UidExpunge,
)


##################################################################
##################################################################
#
class CommandParser(QuotaCommandMixin, IMAPParser):
    """
    Parse one command from an IMAP client, including any literals sent
    as arguments.
    """

    start_rule = "command"
    allow_literal_plus = True

    ##################################################################
    #
    def _p_command(self) -> Command:
        """command = tag SP (command-any / command-auth / command-nonauth /
                             command-select) CRLF
        """
        tag = self._p_tag()
        self._p_sp()
        start = self.pos
        name = self._p_atom(swallow=False)
        method = rule_method_name("_p_cmd_", name)
        rule = getattr(self, method, None) if method else None
        if rule is None:
            raise UnknownCommand("unknown command '%s'" % name, start)
        body = rule()
        self._p_crlf()
        return Command(tag, body)

    ##################################################################
    #
    def _p_simple_command(self) -> SimpleCommand:
        """A command that is just its name."""
        return SimpleCommand(self._p_atom().upper())

    _p_cmd_capability = _p_simple_command
    _p_cmd_noop = _p_simple_command
    _p_cmd_logout = _p_simple_command
    _p_cmd_starttls = _p_simple_command
    _p_cmd_idle = _p_simple_command
    _p_cmd_check = _p_simple_command
    _p_cmd_close = _p_simple_command
    _p_cmd_expunge = _p_simple_command
    _p_cmd_unselect = _p_simple_command
    _p_cmd_namespace = _p_simple_command

    ##################################################################
    #
    def _p_cmd_authenticate(self) -> Authenticate:
        """authenticate = "AUTHENTICATE" SP auth-type [SP (base64 / "=")]

        A "=" initial response (RFC 4959) is an empty one.
        """
        self._p_keyword("authenticate")
        self._p_sp()
        mechanism = self._p_auth_type().upper()
        initial_response = None
        if self._p_simple_string(" ", silent=True) is not None:
            if self._p_simple_string("=", silent=True) is not None:
                initial_response = ""
            else:
                initial_response = self._p_base64()
        return Authenticate(mechanism, initial_response)

    ##################################################################
    #
    def _p_cmd_login(self) -> Login:
        """login = "LOGIN" SP userid SP password"""
        self._p_keyword("login")
        self._p_sp()
        username = self._p_astring()
        self._p_sp()
        return Login(username, self._p_astring())

    ##################################################################
    #
    def _p_mailbox_command(self) -> MailboxCommand:
        """<name> SP mailbox"""
        name = self._p_atom().upper()
        self._p_sp()
        return MailboxCommand(name, self._p_mailbox())

    _p_cmd_select = _p_mailbox_command
    _p_cmd_examine = _p_mailbox_command
    _p_cmd_create = _p_mailbox_command
    _p_cmd_delete = _p_mailbox_command
    _p_cmd_subscribe = _p_mailbox_command
    _p_cmd_unsubscribe = _p_mailbox_command

    ##################################################################
    #
    def _p_cmd_rename(self) -> Rename:
        """rename = "RENAME" SP mailbox SP mailbox"""
        self._p_keyword("rename")
        self._p_sp()
        old_mailbox = self._p_mailbox()
        self._p_sp()
        return Rename(old_mailbox, self._p_mailbox())

    ##################################################################
    #
    def _p_cmd_list(self) -> ListCommand:
        """list = "LIST" SP mailbox SP list-mailbox
        lsub = "LSUB" SP mailbox SP list-mailbox
        """
        name = self._p_atom().upper()
        self._p_sp()
        reference = self._p_mailbox()
        self._p_sp()
        return ListCommand(name, reference, self._p_list_mailbox())

    _p_cmd_lsub = _p_cmd_list

    ##################################################################
    #
    def _p_cmd_status(self) -> StatusCommand:
        """status = "STATUS" SP mailbox SP "(" status-att *(SP status-att) ")"
        """
        self._p_keyword("status")
        self._p_sp()
        mailbox = self._p_mailbox()
        self._p_sp()
        attributes = self._p_paren_list_of(self._p_status_att, nonempty=True)
        return StatusCommand(mailbox, tuple(attributes))

    ##################################################################
    #
    def _p_cmd_copy(self, uid: bool = False) -> Copy:
        """copy = "COPY" SP sequence-set SP mailbox"""
        self._p_keyword("copy")
        self._p_sp()
        sequence_set = self._p_sequence_set()
        self._p_sp()
        return Copy(sequence_set, self._p_mailbox(), uid=uid)

    ##################################################################
    #
    def _p_cmd_store(self, uid: bool = False) -> Store:
        """store = "STORE" SP sequence-set SP store-att-flags

        store-att-flags = (["+" / "-"] "FLAGS" [".SILENT"]) SP
                          (flag-list / (flag *(SP flag)))
        """
        self._p_keyword("store")
        self._p_sp()
        sequence_set = self._p_sequence_set()
        self._p_sp()
        action, silent = self._p_store_att()
        self._p_sp()
        if self._peekc() == 0x28:  # '('
            flags = self._p_flag_list()
        else:
            flags = tuple(self._p_list_of(self._p_flag))
        return Store(sequence_set, action, flags, silent=silent, uid=uid)

    ##################################################################
    #
    def _p_store_att(self) -> Tuple[StoreAction, bool]:
        start = self.pos
        att = self._p_atom().lower()
        silent = att.endswith(".silent")
        if silent:
            att = att[: -len(".silent")]
        try:
            return StoreAction(att), silent
        except ValueError:
            self.pos = start
            raise NoMatch("unknown STORE data item '%s'" % att, start)

    ##################################################################
    #
    def _p_cmd_uid(self) -> CommandBody:
        """uid = "UID" SP (copy / store / uid-expunge)

        uid-expunge is "EXPUNGE" SP sequence-set from UIDPLUS (RFC 4315).
        """
        self._p_keyword("uid")
        self._p_sp()
        start = self.pos
        name = self._p_atom(swallow=False).lower()
        match name:
            case "copy":
                return self._p_cmd_copy(uid=True)
            case "store":
                return self._p_cmd_store(uid=True)
            case "expunge":
                self._p_keyword("expunge")
                self._p_sp()
                return UidExpunge(self._p_sequence_set())
            case _:
                raise UnknownCommand("unknown UID command '%s'" % name, start)

    ##################################################################
    #
    def _p_cmd_enable(self) -> Enable:
        """enable = "ENABLE" 1*(SP capability)"""
        self._p_keyword("enable")
        return Enable(self._p_capability_list())


####################################################################
#
def parse_command(data: bytes, complete: bool = False):
    """
    Parse one command from a client. Returns a tuple of the `Command` and
    the unconsumed remainder.
    """
    return CommandParser(data, complete).parse("command")


####################################################################
#
def parse_sequence_set(data: bytes, complete: bool = False):
    """
    Parse a sequence set, ie: b"1:*,5". Returns a tuple of the sequence set
    (a tuple of `SeqSingle` and `SeqRange`) and the unconsumed remainder.
    """
    return CommandParser(data, complete).parse("sequence-set")
