"""
ekstre - Bank statement import for Turkish banks.

Parses spreadsheet statements exported by Ziraat Bankası and Enpara.com into
normalized transactions keyed by account IBAN.
"""

__version__ = "0.1.0"
