"""
Core functionality for TubeChat.

This package contains the caption source, the transcript chunker, the
in-memory session store, the chat client and the request orchestrator.
"""
