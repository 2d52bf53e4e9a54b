"""Errors raised by the upgrade core."""


class UpgradeError(Exception):
    """Base class for failures the user should see as a plain message."""


class NoSolutionError(UpgradeError):
    """No supported solution was found in the manifest."""


class MultipleSolutionsError(UpgradeError):
    """More than one solution was found in the manifest."""

    def __init__(self, message: str, solutions: list):
        super().__init__(message)
        self.solutions = solutions


class ManifestError(UpgradeError):
    """package.json is missing or malformed."""


class RegistryError(UpgradeError):
    """The npm registry could not answer a query."""


class CommandError(UpgradeError):
    """A package manager command could not be run or exited non-zero."""

    def __init__(self, message: str, argv: list[str], returncode: int | None = None):
        super().__init__(message)
        self.argv = argv
        self.returncode = returncode
