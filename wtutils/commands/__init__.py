"""
Command handlers for the wt CLI.
"""
