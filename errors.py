"""
errors.py

Error taxonomy shared by the search engine and the hosts it drives.

    AccessError         reading/writing simulation memory failed. Fatal.
    CheckpointError     saving/loading a savestate slot failed. Fatal for the
                        baseline restore, a warning for the best-result save.
    ConfigurationError  the memory map / slots / strategy are unusable.
                        Raised from SEARCH_ENGINE.Init() before any trial.
"""


class RackAttackError(Exception):
    """Base class for every error raised by the seed search."""


class AccessError(RackAttackError):
    def __init__(self, address: int, size: int, reason: str = ""):
        self.address = address
        self.size = size
        msg = f"memory access failed at {address:#010x} (+{size})"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class CheckpointError(RackAttackError):
    def __init__(self, slot, reason: str = ""):
        self.slot = slot
        msg = f"checkpoint slot {slot!r} failed"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ConfigurationError(RackAttackError):
    pass
