"""Exception types for hours-rank."""


class HoursRankError(Exception):
    """Base class for all hours-rank errors."""


class DataUnavailable(HoursRankError):
    """The entry store could not be read."""


class IdentityUnresolved(HoursRankError):
    """No display identity exists for a user."""


class EntryNotFound(HoursRankError, ValueError):
    pass


class EntryAlreadyStopped(HoursRankError, ValueError):
    pass


class InvalidEntry(HoursRankError, ValueError):
    pass


class ProfileExists(HoursRankError, ValueError):
    pass


class ProfileNotFound(HoursRankError, ValueError):
    pass


class InvalidProfile(HoursRankError, ValueError):
    pass


class ProjectNotFound(HoursRankError, ValueError):
    pass


class InvalidProject(HoursRankError, ValueError):
    pass
