#!/usr/bin/env python
#
# File: $Id$
#
"""
The IMAP QUOTA extension (RFC 9208).

It adds three capabilities, three commands and two untagged responses. It
plugs in to the core grammar as mixin classes: the capability
classification hook plus `_p_data_<keyword>` and `_p_cmd_<keyword>` rules
that the dispatchers find by name.
"""

# system imports
#
from dataclasses import dataclass
from typing import Tuple

# imapwire imports
#
from .types import Capability, CapabilityKind, CommandBody, Data, Resource


########################################################################
########################################################################
#
@dataclass(frozen=True)
class QuotaGet:
    """One resource of a QUOTA response."""

    resource: Resource
    usage: int
    limit: int


@dataclass(frozen=True)
class QuotaSet:
    """One resource limit of a SETQUOTA command."""

    resource: Resource
    limit: int


@dataclass(frozen=True)
class QuotaData(Data):
    root: str
    quotas: Tuple[QuotaGet, ...]

    def __post_init__(self):
        if not self.quotas:
            raise ValueError("QUOTA response requires at least one resource")


@dataclass(frozen=True)
class QuotaRootData(Data):
    mailbox: str
    roots: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GetQuota(CommandBody):
    root: str


@dataclass(frozen=True)
class GetQuotaRoot(CommandBody):
    mailbox: str


@dataclass(frozen=True)
class SetQuota(CommandBody):
    root: str
    quotas: Tuple[QuotaSet, ...] = ()


##################################################################
##################################################################
#
class QuotaParserMixin:
    """
    The capabilities and the rules that quota commands and responses
    share. Must come before `IMAPParser` in the bases.
    """

    ##################################################################
    #
    def _classify_capability(self, atom: str) -> Capability:
        lowered = atom.lower()
        if lowered == CapabilityKind.QUOTASET.value:
            return Capability(CapabilityKind.QUOTASET)
        if lowered == CapabilityKind.QUOTA.value:
            return Capability(CapabilityKind.QUOTA)
        prefix = CapabilityKind.QUOTA_RES.value
        if lowered.startswith(prefix) and len(atom) > len(prefix):
            return Capability(
                CapabilityKind.QUOTA_RES, Resource.from_atom(atom[len(prefix) :])
            )
        return super()._classify_capability(atom)

    ##################################################################
    #
    def _p_quota_root_name(self) -> str:
        """quota-root-name = astring"""
        return self._p_astring()

    ##################################################################
    #
    def _p_resource_name(self) -> Resource:
        """
        resource-name = "STORAGE" / "MESSAGE" / "MAILBOX" /
                        "ANNOTATION-STORAGE" / resource-name-ext

        All of them are atoms. The atom is swallowed whole and then
        classified so "STORAGEX" is an unknown resource, not STORAGE
        followed by junk.
        """
        return Resource.from_atom(self._p_atom())


##################################################################
##################################################################
#
class QuotaResponseMixin(QuotaParserMixin):

    ##################################################################
    #
    def _p_data_quota(self) -> QuotaData:
        """quota-response = "QUOTA" SP quota-root-name SP quota-list"""
        self._p_keyword("quota")
        self._p_sp()
        root = self._p_quota_root_name()
        self._p_sp()
        return QuotaData(root, self._p_quota_list())

    ##################################################################
    #
    def _p_data_quotaroot(self) -> QuotaRootData:
        """quotaroot-response = "QUOTAROOT" SP mailbox *(SP quota-root-name)"""
        self._p_keyword("quotaroot")
        self._p_sp()
        mailbox = self._p_mailbox()
        roots = self._p_preceded_list_of(self._p_quota_root_name)
        return QuotaRootData(mailbox, tuple(roots))

    ##################################################################
    #
    def _p_quota_list(self) -> Tuple[QuotaGet, ...]:
        """quota-list = "(" quota-resource *(SP quota-resource) ")"

        Unlike setquota-list this may not be empty.
        """
        return tuple(
            self._p_paren_list_of(self._p_quota_resource, nonempty=True)
        )

    ##################################################################
    #
    def _p_quota_resource(self) -> QuotaGet:
        """quota-resource = resource-name SP resource-usage SP resource-limit"""
        resource = self._p_resource_name()
        self._p_sp()
        usage = self._p_number64()
        self._p_sp()
        return QuotaGet(resource, usage, self._p_number64())


##################################################################
##################################################################
#
class QuotaCommandMixin(QuotaParserMixin):

    ##################################################################
    #
    def _p_cmd_getquota(self) -> GetQuota:
        """getquota = "GETQUOTA" SP quota-root-name"""
        self._p_keyword("getquota")
        self._p_sp()
        return GetQuota(self._p_quota_root_name())

    ##################################################################
    #
    def _p_cmd_getquotaroot(self) -> GetQuotaRoot:
        """getquotaroot = "GETQUOTAROOT" SP mailbox"""
        self._p_keyword("getquotaroot")
        self._p_sp()
        return GetQuotaRoot(self._p_mailbox())

    ##################################################################
    #
    def _p_cmd_setquota(self) -> SetQuota:
        """setquota = "SETQUOTA" SP quota-root-name SP setquota-list"""
        self._p_keyword("setquota")
        self._p_sp()
        root = self._p_quota_root_name()
        self._p_sp()
        return SetQuota(root, self._p_setquota_list())

    ##################################################################
    #
    def _p_setquota_list(self) -> Tuple[QuotaSet, ...]:
        """setquota-list = "(" [setquota-resource *(SP setquota-resource)] ")"

        An empty list removes every limit on the root.
        """
        return tuple(self._p_paren_list_of(self._p_setquota_resource))

    ##################################################################
    #
    def _p_setquota_resource(self) -> QuotaSet:
        """setquota-resource = resource-name SP resource-limit"""
        resource = self._p_resource_name()
        self._p_sp()
        return QuotaSet(resource, self._p_number64())
