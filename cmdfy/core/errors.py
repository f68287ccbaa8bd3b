"""Exceptions raised by cmdfy."""


class CmdfyError(Exception):
    """Base exception for cmdfy."""
    pass


class ConfigError(CmdfyError):
    """Raised when configuration cannot be loaded, parsed or is incomplete."""
    pass


class ProviderNotFoundError(ConfigError):
    """Raised when a provider name is not registered."""

    def __init__(self, name: str):
        super().__init__(f"provider not found: {name}")
        self.name = name


class ProviderInitError(CmdfyError):
    """Raised when a provider's credentials cannot be resolved."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.provider = provider


class GenerationError(CmdfyError):
    """Raised when a provider fails to produce a usable command."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.provider = provider


class NoEligibleProviders(CmdfyError):
    """Raised when compare mode has no provider with resolvable credentials."""

    def __init__(self, message: str = "no providers with usable credentials"):
        super().__init__(message)


class AssemblyError(CmdfyError):
    """Raised when command steps cannot be joined into valid shell text."""
    pass


class SelectionError(CmdfyError):
    """Raised on an illegal selection transition."""
    pass


class ExecutionError(CmdfyError):
    """Raised when the shell cannot be launched or the command fails."""

    def __init__(self, message: str, command: str = "", returncode: int = -1):
        super().__init__(message)
        self.command = command
        self.returncode = returncode


class HistoryError(CmdfyError):
    """Raised when the history log cannot be read or written."""
    pass
