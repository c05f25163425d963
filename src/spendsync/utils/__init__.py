"""Utility helpers for spendsync."""
