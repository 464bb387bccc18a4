#!/usr/bin/env python
#
# File: $Id$
#
"""
The exceptions raised by the grammar recognizers. They are kept in their own
module so the parsers, the value types and the stream readers can all use
them without circular imports.

There are only two ways for a parse to fail:

  `Incomplete` - the bytes seen so far are a valid prefix of some unit but the
                 unit is not finished. Append more bytes and try again.
  `BadSyntax`  - no continuation of the input can match the grammar.

`NoMatch` is the kind of `BadSyntax` that ordered alternation is allowed to
recover from by trying the next alternative.
"""

from typing import Optional


#######################################################################
#
class ParseException(Exception):
    def __init__(
        self, value: str = "parse exception", position: Optional[int] = None
    ):
        self.value = value
        self.position = position

    def __str__(self):
        if self.position is None:
            return self.value
        return "%s (at byte %d)" % (self.value, self.position)


#######################################################################
#
class Incomplete(ParseException):
    """
    Not enough bytes yet. `needed` is the minimum number of additional bytes
    required when it can be determined (ie: inside a literal), otherwise None.
    """

    def __init__(
        self,
        value: str = "incomplete",
        needed: Optional[int] = None,
        position: Optional[int] = None,
    ):
        self.value = value
        self.needed = needed
        self.position = position

    def __str__(self):
        if self.needed is None:
            return "Incomplete: %s" % self.value
        return "Incomplete: %s, need at least %d more bytes" % (
            self.value,
            self.needed,
        )


#######################################################################
#
class BadSyntax(ParseException):
    def __init__(
        self, value: str = "bad syntax", position: Optional[int] = None
    ):
        self.value = value
        self.position = position

    def __str__(self):
        return "BadSyntax: %s" % super().__str__()


#######################################################################
#
class NoMatch(BadSyntax):
    def __init__(self, value: str = "no match", position: Optional[int] = None):
        self.value = value
        self.position = position

    def __str__(self):
        return "NoMatch: %s" % ParseException.__str__(self)


#######################################################################
#
class UnknownCommand(NoMatch):
    def __init__(
        self, value: str = "unknown command", position: Optional[int] = None
    ):
        self.value = value
        self.position = position

    def __str__(self):
        return "UnknownCommand: %s" % ParseException.__str__(self)
