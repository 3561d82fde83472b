"""
8085 Program Loader
===================
Turns line-oriented 8085 mnemonic text into the opcode bytes the
i8085_emulator package executes. See loader.py for the accepted syntax.
"""

__version__ = "0.2.0"

from .loader import (
    LoaderError, ListingEntry, RejectedLine, LoadResult,
    ProgramLoader, load_program,
)
