"""Textual user interface for copypick."""
