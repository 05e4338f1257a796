"""
Deployment flows.

Each flow builds the descriptors it deploys, in the order they should run
when nothing else constrains them:

- token: BRO token only, when ``deployToken`` is set
- pair:  BRO/UST pair on astroport (when ``createPair`` is set) and the oracle
- ido:   BRO token, airdrop and vesting
- core:  the protocol on top of an existing BRO token and oracle
- full:  token, pair and oracle, the core set, then BRO seed transfers
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from brodeploy.config.loader import load_config
from brodeploy.config.logging_config import setup_deploy_logger
from brodeploy.config.settings import Settings
from brodeploy.helpers.artifact_store import Artifact, ArtifactStore
from brodeploy.setup.contracts import (
    Airdrop,
    AstroFactory,
    BbroMinter,
    BbroToken,
    BondingV1,
    BroToken,
    Contract,
    DistributorV1,
    EpochManager,
    IdoTreasury,
    MvpTreasury,
    OpReserveTreasury,
    Oracle,
    RewardsPool,
    StakingV1,
    TokenPool,
    Vesting,
    WhitelistSale,
)
from brodeploy.setup.orchestrator import DeployPlan, Orchestrator

logger = logging.getLogger(__name__)

SEED_TARGETS = ("airdrop", "vesting", "rewards_pool")


def token_contracts(client: Any, config: dict[str, Any], artifact: Artifact, distribute_to: tuple[str, ...] = ()) -> list[Contract]:
    if not config.get("deployToken"):
        logger.info(f"Token deploy function is disabled. Current BRO token address: {artifact.bro_token or '<none>'}")
        return []
    return [BroToken(client, config, artifact, distribute_to=distribute_to)]


def pair_contracts(client: Any, config: dict[str, Any], artifact: Artifact) -> list[Contract]:
    contracts: list[Contract] = []
    if (config.get("bro_ust_pair") or {}).get("createPair"):
        contracts.append(AstroFactory(client, config, artifact))
    else:
        logger.info(f"BRO/UST pair deploy disabled. Current pair address: {artifact.bro_ust_pair or '<none>'}")
    contracts.append(Oracle(client, config, artifact))
    return contracts


def core_contracts(client: Any, config: dict[str, Any], artifact: Artifact) -> list[Contract]:
    return [
        Airdrop(client, config, artifact),
        Vesting(client, config, artifact),
        BbroMinter(client, config, artifact),
        BbroToken(client, config, artifact),
        RewardsPool(client, config, artifact),
        MvpTreasury(client, config, artifact),
        IdoTreasury(client, config, artifact),
        OpReserveTreasury(client, config, artifact),
        TokenPool(client, config, artifact),
        EpochManager(client, config, artifact),
        StakingV1(client, config, artifact),
        BondingV1(client, config, artifact),
        WhitelistSale(client, config, artifact),
        DistributorV1(client, config, artifact),
    ]


def token_plan(client: Any, config: dict[str, Any], artifact: Artifact) -> DeployPlan:
    return DeployPlan(token_contracts(client, config, artifact))


def pair_plan(client: Any, config: dict[str, Any], artifact: Artifact) -> DeployPlan:
    return DeployPlan(pair_contracts(client, config, artifact), requires=("bro_token",))


def ido_plan(client: Any, config: dict[str, Any], artifact: Artifact) -> DeployPlan:
    return DeployPlan([
        BroToken(client, config, artifact),
        Airdrop(client, config, artifact),
        Vesting(client, config, artifact),
    ])


def core_plan(client: Any, config: dict[str, Any], artifact: Artifact) -> DeployPlan:
    return DeployPlan(core_contracts(client, config, artifact), requires=("bro_token", "oracle"))


def full_plan(client: Any, config: dict[str, Any], artifact: Artifact) -> DeployPlan:
    contracts = token_contracts(client, config, artifact, distribute_to=SEED_TARGETS)
    contracts += pair_contracts(client, config, artifact)
    contracts += core_contracts(client, config, artifact)
    return DeployPlan(contracts)


FLOWS: dict[str, Callable[[Any, dict[str, Any], Artifact], DeployPlan]] = {
    "token": token_plan,
    "pair": pair_plan,
    "ido": ido_plan,
    "core": core_plan,
    "full": full_plan,
}


def prepare(
    flow: str,
    settings: Settings,
    client: Any,
    store: ArtifactStore,
) -> tuple[Artifact, DeployPlan]:
    """Load artifact and config and build the flow's plan; no chain calls."""
    if flow not in FLOWS:
        raise ValueError(f"Unknown flow '{flow}'. Choose from: {', '.join(FLOWS)}")
    artifact = store.load(settings.network_id)
    artifact.network = settings.network_id
    config = load_config(settings.network_id, settings.config_dir)
    return artifact, FLOWS[flow](client, config, artifact)


def run_flow(
    flow: str,
    settings: Settings,
    client: Any,
    store: Optional[ArtifactStore] = None,
    redeploy: Iterable[str] = (),
    log_dir=None,
) -> Artifact:
    """Run one flow end to end and return the final artifact."""
    store = store or ArtifactStore(settings.artifacts_dir)
    artifact, plan = prepare(flow, settings, client, store)
    orchestrator = Orchestrator(
        store,
        settings.network_id,
        settings.admin_address,
        redeploy=redeploy,
        audit=setup_deploy_logger(settings.network_id, log_dir),
    )
    orchestrator.run(plan, artifact)
    store.write(artifact, settings.network_id)
    logger.info(f"You can find deployed contract addresses in artifacts folder: {store.path_for(settings.network_id)}")
    return artifact


def describe_flow(
    flow: str,
    settings: Settings,
    client: Any,
    store: Optional[ArtifactStore] = None,
    redeploy: Iterable[str] = (),
) -> list[list[str]]:
    """Resolve a flow's plan without touching the chain; rows for a table."""
    store = store or ArtifactStore(settings.artifacts_dir)
    artifact, plan = prepare(flow, settings, client, store)
    orchestrator = Orchestrator(store, settings.network_id, settings.admin_address, redeploy=redeploy)
    return orchestrator.describe(plan, artifact)
