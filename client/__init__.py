"""
Client package for the LAN Chat Relay.

This package contains all client-side functionality including:
- The chat protocol client
- Console and PyQt6 user interfaces
- Roster sorting and history search helpers
- Configuration and utilities
"""
