"""
imapwire: a streaming parser for the IMAP4rev1 wire protocol.
"""

__version__ = "1.0.0"
