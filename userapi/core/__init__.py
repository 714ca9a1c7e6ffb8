"""Core — domain entity, error taxonomy and storage contracts (no IO)."""
