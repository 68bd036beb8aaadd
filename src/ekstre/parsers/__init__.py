"""
ekstre parsers - Bank statement parsers.

Architecture:
- BankStatementParser: Abstract base class for bank parsers
- ParserRegistry: Bank registration and file-name detection
- StatementDispatcher: Parser selection, decoding and error consolidation
"""
