"""
Server package for the LAN Chat Relay.

This package contains all server-side functionality including:
- Connection acceptance and per-client session workers
- The shared client registry
- Message broadcasting and history persistence
- Configuration and utilities
"""
