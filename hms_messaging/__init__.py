"""Event publication and multi-channel notification dispatch for the hospital services."""
