"""Well-known mapping namespace names."""

INTERMEDIARY = "intermediary"
NAMED = "named"
