"""
Chat module for server-side messaging functionality.

Handles:
- Session lifecycle and name negotiation
- Unique-name client registry
- Ordered delivery queue and history persistence
- Message and roster broadcasting
"""
