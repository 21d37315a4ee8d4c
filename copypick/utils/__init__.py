"""Utility helpers for copypick."""
