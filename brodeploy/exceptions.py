"""Errors raised while planning or executing a deployment run.

Nothing in the library catches these; they propagate to the CLI, which logs
them and exits with a non-zero status.
"""

from __future__ import annotations

from pathlib import Path


class DeployError(Exception):
    """Base class for every error raised by brodeploy."""


class ConfigError(DeployError):
    """Config or environment is missing a required value or has a bad shape."""


class ConfigNotFoundError(ConfigError):
    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"Config not found: {self.path}")


class MissingDependencyError(DeployError):
    """A prerequisite address (artifact field or config value) is missing."""

    def __init__(self, field: str, hint: str, required_by: str | None = None):
        self.field = field
        self.hint = hint
        self.required_by = required_by
        who = f" (required by {required_by})" if required_by else ""
        super().__init__(f"'{field}' is not set{who}. {hint}")


class DependencyCycleError(DeployError):
    def __init__(self, steps: list[str]):
        self.steps = list(steps)
        super().__init__(f"Dependency cycle between steps: {', '.join(self.steps)}")


class DuplicateProducerError(DeployError):
    def __init__(self, field: str, steps: list[str]):
        self.field = field
        self.steps = list(steps)
        super().__init__(f"Artifact field '{field}' is written by more than one step: {', '.join(self.steps)}")


class InvalidMessageError(DeployError):
    """An instantiation message failed schema validation."""

    def __init__(self, contract: str, details: str):
        self.contract = contract
        self.details = details
        super().__init__(f"Invalid instantiate message for {contract}:\n{details}")


class ChainTransactionError(DeployError):
    """A broadcast transaction came back flagged as failed."""

    def __init__(self, action: str, code: int | None, codespace: str | None, raw_log: str | None):
        self.action = action
        self.code = code
        self.codespace = codespace
        self.raw_log = raw_log
        super().__init__(
            f"{action} failed. code: {code}, codespace: {codespace}, raw_log: {raw_log}"
        )


class OwnershipHandoffError(DeployError):
    """A contract is still owned by the deployer when the run finishes."""

    def __init__(self, contracts: list[str]):
        self.contracts = list(contracts)
        super().__init__(
            "Ownership was never handed off to the configured owner for: "
            + ", ".join(self.contracts)
        )
