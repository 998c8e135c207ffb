"""
Chat module for client-side messaging functionality.

Handles:
- Connecting with a display name
- Sending chat messages
- Receiving chat lines and roster updates
"""
