"""CLI commands for spendsync."""
