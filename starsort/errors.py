"""Exceptions shared across StarSort layers."""


class ConfigurationError(Exception):
    """Fatal setup problem: missing setting, sheet or column.

    Raised before any file is touched; the run aborts.
    """
    pass
