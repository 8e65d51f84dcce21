"""Shared infrastructure: exceptions, logging and the retry policy."""
