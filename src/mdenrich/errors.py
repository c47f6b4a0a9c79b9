"""Exceptions raised for plugin registration misuse; document problems are reported as values"""


class MdenrichError(Exception):
    """Base class for mdenrich errors."""


class PluginError(MdenrichError):
    """A plugin is malformed or conflicts with one already registered."""


class RegistryFrozenError(PluginError):
    """Registration attempted after a pipeline run has started."""
