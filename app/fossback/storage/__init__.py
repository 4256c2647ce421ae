"""External storage collaborators.

Adapters for the fossil repository and the cpio link utility.
"""

from fossback.storage.fossil import CONTROL_FILES, FossilBackend, HashMode, hash_mode_for
from fossback.storage.linker import CpioLinker, is_blocks_trailer

__all__ = [
    "CONTROL_FILES",
    "CpioLinker",
    "FossilBackend",
    "HashMode",
    "hash_mode_for",
    "is_blocks_trailer",
]
