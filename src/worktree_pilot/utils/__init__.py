"""Utility helpers for worktree-pilot."""
