"""Builders, parser, id generation and the peer engine."""
