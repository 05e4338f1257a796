"""
Deploy orchestrator.

A flow hands over its contract descriptors in declaration order. DeployPlan
turns them into steps (one deploy step per descriptor plus one step per
wiring call), links every step that reads an artifact field to the step that
writes it, and sorts the graph topologically with ties broken by declaration
order. Every prerequisite is checked here, so a plan that cannot complete
fails before the first transaction.

Orchestrator executes a resolved plan. Descriptors whose outputs are already
in the artifact are skipped, which makes re-running a failed flow resume where
it stopped.
"""
from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from brodeploy.config.logging_config import log_deployment
from brodeploy.exceptions import (
    DependencyCycleError,
    DuplicateProducerError,
    MissingDependencyError,
)
from brodeploy.helpers.artifact_store import Artifact, ArtifactStore
from brodeploy.setup.contracts import Contract, WiringStep, hint_for
from brodeploy.setup.ownership import current_owner, ensure_handed_off

logger = logging.getLogger(__name__)


@dataclass
class Step:
    key: str
    contract: Contract
    reads: tuple[str, ...]
    writes: tuple[str, ...] = ()
    after: tuple[str, ...] = ()
    wiring: Optional[WiringStep] = None

    @property
    def kind(self) -> str:
        return "deploy" if self.wiring is None else "wiring"


@dataclass
class DeployPlan:
    """Ordered deploy and wiring steps for one flow."""

    contracts: list[Contract]
    # artifact fields the flow needs before anything runs
    requires: tuple[str, ...] = ()
    steps: list[Step] = field(init=False)

    def __post_init__(self):
        self.steps = self._build_steps()

    def _build_steps(self) -> list[Step]:
        steps: list[Step] = []
        deferred: list[Step] = []
        for contract in self.contracts:
            deploy_key = f"deploy:{contract.name}"
            steps.append(
                Step(deploy_key, contract, reads=contract.dependencies(), writes=contract.outputs)
            )
            wiring = contract.wiring()
            earlier = [f"{contract.name}:{w.name}" for w in wiring if not w.last]
            for w in wiring:
                after = (deploy_key,) + (tuple(earlier) if w.last else ())
                step = Step(f"{contract.name}:{w.name}", contract, reads=w.reads, after=after, wiring=w)
                (deferred if w.deferred else steps).append(step)
        return steps + deferred

    @property
    def handoffs(self):
        return [c.handoff for c in self.contracts if c.handoff is not None]

    def producers(self) -> dict[str, str]:
        """Map each artifact field to the single step that writes it."""
        writers: dict[str, list[str]] = {}
        for step in self.steps:
            for name in step.writes:
                writers.setdefault(name, []).append(step.key)
        for name, keys in writers.items():
            if len(keys) > 1:
                raise DuplicateProducerError(name, keys)
        return {name: keys[0] for name, keys in writers.items()}

    def resolve(self, artifact: Artifact) -> list[Step]:
        """Return the steps in execution order.

        Raises:
            DuplicateProducerError: If two steps write the same field.
            MissingDependencyError: If a read field is neither produced by the
                plan nor already recorded in the artifact.
            DependencyCycleError: If the steps cannot be ordered.
        """
        producers = self.producers()

        for name in self.requires:
            if name not in producers and not artifact.has(name):
                raise MissingDependencyError(name, hint_for(name))

        index = {step.key: i for i, step in enumerate(self.steps)}
        edges: dict[str, set[str]] = {step.key: set() for step in self.steps}
        for step in self.steps:
            for name in step.reads:
                if name in producers:
                    if producers[name] != step.key:
                        edges[producers[name]].add(step.key)
                elif not artifact.has(name):
                    raise MissingDependencyError(name, hint_for(name), required_by=step.contract.name)
            for key in step.after:
                edges[key].add(step.key)

        indegree = {key: 0 for key in edges}
        for targets in edges.values():
            for key in targets:
                indegree[key] += 1

        ready = [index[key] for key, degree in indegree.items() if degree == 0]
        heapq.heapify(ready)
        ordered: list[Step] = []
        while ready:
            step = self.steps[heapq.heappop(ready)]
            ordered.append(step)
            for key in edges[step.key]:
                indegree[key] -= 1
                if indegree[key] == 0:
                    heapq.heappush(ready, index[key])

        if len(ordered) != len(self.steps):
            blocked = [step.key for step in self.steps if indegree[step.key] > 0]
            raise DependencyCycleError(blocked)
        return ordered


def deploy_contract(
    store: ArtifactStore,
    network_id: str,
    artifact: Artifact,
    contract: Contract,
    admin: str,
    code_ids: Optional[dict[str, int]] = None,
    audit: Optional[logging.Logger] = None,
) -> None:
    """Store code, instantiate, record the address and persist the artifact.

    The artifact file is only written after the chain accepted the contract,
    so a failure leaves the file as it was before this call.
    """
    code_ids = {} if code_ids is None else code_ids
    code_id = contract.deploy(admin, artifact, code_ids)
    contract.set_artifact_data(artifact)
    store.write(artifact, network_id)
    if audit is not None:
        log_deployment(audit, contract.name, contract.address, code_id=code_id, admin=admin)


class Orchestrator:
    """Runs a resolved plan against the chain."""

    def __init__(
        self,
        store: ArtifactStore,
        network_id: str,
        admin: str,
        redeploy: Iterable[str] = (),
        audit: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.network_id = network_id
        self.admin = admin
        self.redeploy = set(redeploy)
        self.audit = audit
        self.code_ids: dict[str, int] = {}
        self._fresh: set[str] = set()
        self._configs: dict[str, dict[str, Any]] = {}

    def is_deployed(self, contract: Contract, artifact: Artifact) -> bool:
        if contract.name in self.redeploy:
            return False
        return all(artifact.has(name) for name in contract.outputs)

    def describe(self, plan: DeployPlan, artifact: Artifact) -> list[list[str]]:
        """Rows for a dry-run table; makes no chain calls."""
        rows = []
        for i, step in enumerate(plan.resolve(artifact), start=1):
            contract = step.contract
            if step.wiring is None:
                if self.is_deployed(contract, artifact):
                    action = f"skip (deployed at {artifact.get(contract.name)})"
                else:
                    action = f"deploy {contract.wasm}" if contract.wasm else "execute create_pair"
            elif not self.is_deployed(contract, artifact):
                action = "execute"
            elif step.wiring.applied is None:
                action = "skip (cannot verify on resume)"
            else:
                action = "execute if not applied on chain"
            rows.append([str(i), step.key, action, ", ".join(step.reads) or "-"])
        return rows

    def run(self, plan: DeployPlan, artifact: Artifact) -> list[Step]:
        """Execute ``plan``; returns the steps in the order they were considered."""
        steps = plan.resolve(artifact)
        for step in steps:
            if step.wiring is None:
                self._deploy(step.contract, artifact)
            else:
                self._wire(step.contract, step.wiring, artifact)
        ensure_handed_off(plan.handoffs)
        return steps

    def _deploy(self, contract: Contract, artifact: Artifact) -> None:
        if self.is_deployed(contract, artifact):
            logger.info(f"{contract.name} already deployed at {artifact.get(contract.name)}, skipping")
            return
        logger.info(f"Deploying {contract.name}")
        deploy_contract(self.store, self.network_id, artifact, contract, self.admin, self.code_ids, self.audit)
        self._fresh.add(contract.name)

    def _wire(self, contract: Contract, wiring: WiringStep, artifact: Artifact) -> None:
        label = f"{contract.name}:{wiring.name}"
        if contract.name in self._fresh:
            wiring.action(artifact)
            return

        if wiring.applied is None:
            logger.warning(f"{label}: {contract.name} was deployed by an earlier run and this call cannot be verified, skipping")
            return

        cfg = self._resumed_config(contract)
        handoff = contract.handoff
        if handoff is not None and current_owner(cfg) != handoff.deployer:
            logger.info(f"{label}: {contract.name} is no longer owned by the deployer, skipping")
            return
        if wiring.applied(cfg, artifact):
            logger.info(f"{label}: already applied on chain, skipping")
            return
        wiring.action(artifact)

    def _resumed_config(self, contract: Contract) -> dict[str, Any]:
        if contract.name not in self._configs:
            cfg = contract.query_config()
            if contract.handoff is not None:
                contract.handoff.sync(current_owner(cfg))
            self._configs[contract.name] = cfg
        return self._configs[contract.name]
