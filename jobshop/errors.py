"""Exception types raised on invalid problem data or schedules."""


class JobShopError(ValueError):
    """Base class for invalid-input errors of the job-shop core."""


class InvalidModel(JobShopError):
    """Problem model cannot be built (no jobs, no machines, bad operation)."""


class InvalidSchedule(JobShopError):
    """Schedule does not match the per-job operation counts of a model."""
