"""Core infrastructure for mole.

Paths, configuration, and deletion history shared by the CLI.
"""
