"""mole - Safe disk cleanup for Linux.

Every deletion passes through the safety engine in :mod:`mole.safety`
before any bytes are removed.
"""

__version__ = "0.1.0"
