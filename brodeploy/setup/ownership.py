"""
Deployer-owned bootstrap ownership.

Some contracts (bbro-minter, rewards pool) are instantiated with the deploying
wallet as ``gov_contract`` so the run can issue privileged configuration calls
right after deployment. Each of them carries an OwnershipHandoff that starts
PROVISIONAL and must reach FINAL before the run ends.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from brodeploy.exceptions import DeployError, OwnershipHandoffError

logger = logging.getLogger(__name__)


class OwnershipPhase(Enum):
    PROVISIONAL = "provisional"
    FINAL = "final"


@dataclass
class OwnershipHandoff:
    """Two-phase owner of one contract: deployer first, configured owner last."""

    contract: str
    deployer: str
    final_owner: str
    phase: OwnershipPhase = OwnershipPhase.PROVISIONAL

    @property
    def is_final(self) -> bool:
        return self.phase is OwnershipPhase.FINAL

    def transfer_msg(self) -> dict[str, Any]:
        return {"update_config": {"new_gov_contract": self.final_owner}}

    def transfer(self, client: Any, address: str) -> None:
        """Move ``gov_contract`` from the deployer to the configured owner."""
        if self.is_final:
            raise DeployError(f"Ownership of {self.contract} was already handed off")
        if self.final_owner == self.deployer:
            logger.info(f"{self.contract}: configured owner is the deployer, nothing to hand off")
        else:
            client.execute(address, self.transfer_msg())
            logger.info(f"Moved ownership of {self.contract} to {self.final_owner}")
        self.phase = OwnershipPhase.FINAL

    def sync(self, gov_contract: str) -> None:
        """Set the phase from the owner reported by an on-chain ``config`` query."""
        if gov_contract == self.deployer and self.final_owner != self.deployer:
            self.phase = OwnershipPhase.PROVISIONAL
        else:
            self.phase = OwnershipPhase.FINAL


def current_owner(cfg: dict[str, Any]) -> str:
    """Owner reported by a ``config`` query (``gov_contract`` or ``owner``)."""
    return cfg.get("gov_contract") or cfg.get("owner", "")


def ensure_handed_off(handoffs: list[OwnershipHandoff]) -> None:
    pending = [h.contract for h in handoffs if not h.is_final]
    if pending:
        raise OwnershipHandoffError(pending)
