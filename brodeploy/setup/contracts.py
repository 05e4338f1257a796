"""
Contract descriptors.

One class per contract type. A descriptor knows which wasm file it needs,
which artifact fields its instantiate message reads, how to build and
validate that message, and which post-deploy calls (wiring) it needs.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Optional

from brodeploy.config.loader import config_section
from brodeploy.config.messages import (
    AirdropInstantiateMsg,
    AssetInfo,
    BbroMinterInstantiateMsg,
    BondingInstantiateMsg,
    Cw20InstantiateMsg,
    DistributorInstantiateMsg,
    EpochManagerInstantiateMsg,
    Msg,
    OracleInstantiateMsg,
    RewardsPoolInstantiateMsg,
    StakingInstantiateMsg,
    TokenPoolInstantiateMsg,
    TreasuryInstantiateMsg,
    VestingInstantiateMsg,
    WhitelistSaleInstantiateMsg,
    validate_msg,
)
from brodeploy.exceptions import ConfigError, MissingDependencyError
from brodeploy.helpers.artifact_store import Artifact
from brodeploy.helpers.tx_logs import event_attribute
from brodeploy.setup.ownership import OwnershipHandoff

logger = logging.getLogger(__name__)

INITIAL_BRO_BALANCE = 1_000_000_000_000000
UST_DENOM = "uusd"

# How to produce an artifact field when a flow needs it but nothing set it.
REMEDIATION_HINTS: dict[str, str] = {
    "bro_token": "BRO token address must be stored in artifact. Deploy token first using the deploy-token command.",
    "oracle": "Price oracle for BRO/UST pair must be stored in artifact. Deploy pair and oracle first using the deploy-pair command.",
    "bro_ust_pair": "BRO/UST pair must be stored in artifact. Create it first using the deploy-pair command.",
    "bro_ust_lp_token": "BRO/UST LP token must be stored in artifact. Create the pair first using the deploy-pair command.",
    "bro_ust_pair.factory_address": "Specify astro-factory address to create a new pair contract.",
}


def hint_for(field: str) -> str:
    return REMEDIATION_HINTS.get(
        field, f"Deploy the contract recorded as '{field}' first or add its address to the artifact file."
    )


@dataclass
class WiringStep:
    """A post-deploy call against a descriptor's own contract.

    ``applied`` receives the contract's ``config`` query result and the
    artifact; it lets a resumed run skip calls that already happened. Steps
    without it only run right after a fresh instantiation.
    """

    name: str
    reads: tuple[str, ...]
    action: Callable[[Artifact], None]
    applied: Optional[Callable[[dict[str, Any], Artifact], bool]] = None
    # runs after every other wiring step of the same contract
    last: bool = False
    # scheduled after every deploy step of the flow
    deferred: bool = False


class Contract:
    """Base descriptor: store code, instantiate, record the address."""

    name: ClassVar[str] = ""
    wasm: ClassVar[str] = ""
    config_key: ClassVar[str] = ""
    message_model: ClassVar[type[Msg]]
    # instantiate message key -> artifact field it is filled from
    address_fields: ClassVar[dict[str, str]] = {}

    def __init__(self, client: Any, config: dict[str, Any], artifact: Artifact):
        self.client = client
        self.config = config_section(config, self.config_key) if self.config_key else {}
        self.address = artifact.get(self.name)
        self.handoff: Optional[OwnershipHandoff] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address={self.address!r})"

    @property
    def outputs(self) -> tuple[str, ...]:
        return (self.name,)

    def dependencies(self) -> tuple[str, ...]:
        return tuple(self.address_fields.values())

    def require(self, artifact: Artifact, field: str) -> str:
        value = artifact.get(field)
        if not value:
            raise MissingDependencyError(field, hint_for(field), required_by=self.name)
        return value

    def message_data(self, artifact: Artifact) -> dict[str, Any]:
        data = dict(self.config)
        for key, field in self.address_fields.items():
            data[key] = self.require(artifact, field)
        return data

    def instantiate_msg(self, artifact: Artifact) -> Msg:
        return validate_msg(self.message_model, self.message_data(artifact), self.name)

    def deploy(self, admin: str, artifact: Artifact, code_ids: dict[str, int]) -> Optional[int]:
        """Store code (once per wasm file per run) and instantiate; return the code id."""
        msg = self.instantiate_msg(artifact).as_msg()
        code_id = code_ids.get(self.wasm)
        if code_id is None:
            code_id = self.client.store_code(self.wasm)
            code_ids[self.wasm] = code_id
        self.address = self.client.instantiate(admin, code_id, msg)
        return code_id

    def set_artifact_data(self, artifact: Artifact) -> None:
        artifact.set(self.name, self.address)

    def wiring(self) -> list[WiringStep]:
        return []

    def query_config(self) -> dict[str, Any]:
        return self.client.query(self.address, {"config": {}})


# bro token
class BroToken(Contract):
    name = "bro_token"
    wasm = "cw20_base.wasm"
    config_key = "bro_token"
    message_model = Cw20InstantiateMsg

    # bro_distributions key -> artifact field of the recipient
    DISTRIBUTION_TARGETS: ClassVar[dict[str, str]] = {
        "airdrop": "airdrop",
        "vesting": "vesting",
        "rewards": "rewards_pool",
    }

    def __init__(
        self,
        client: Any,
        config: dict[str, Any],
        artifact: Artifact,
        distribute_to: tuple[str, ...] = (),
    ):
        super().__init__(client, config, artifact)
        self.holder = config.get("initialBroBalanceHolderAddress") or client.sender_address
        self.distributions: list[tuple[str, str]] = []

        amounts = config.get("bro_distributions") or {}
        for key, field in self.DISTRIBUTION_TARGETS.items():
            if field in distribute_to and amounts.get(key):
                self.distributions.append((field, str(amounts[key])))
        if self.distributions and self.holder != client.sender_address:
            logger.warning(
                f"Initial BRO holder {self.holder} is not the deployer; "
                "seed transfers must be sent from the holder wallet"
            )
            self.distributions = []

    def message_data(self, artifact: Artifact) -> dict[str, Any]:
        data = super().message_data(artifact)
        data["initial_balances"] = [{"address": self.holder, "amount": str(INITIAL_BRO_BALANCE)}]
        return data

    def transfer(self, recipient: str, amount: str) -> None:
        self.client.execute(self.address, {"transfer": {"recipient": recipient, "amount": amount}})

    def balance(self, address: str) -> int:
        return int(self.client.query(self.address, {"balance": {"address": address}})["balance"])

    def query_config(self) -> dict[str, Any]:
        # cw20 has no config query
        return self.client.query(self.address, {"token_info": {}})

    def wiring(self) -> list[WiringStep]:
        steps = []
        for field, amount in self.distributions:
            def seed(artifact: Artifact, field: str = field, amount: str = amount) -> None:
                self.transfer(artifact.get(field), amount)
                logger.info(f"Transferred {amount} BRO to {field}")

            def funded(cfg: dict[str, Any], artifact: Artifact, field: str = field, amount: str = amount) -> bool:
                return self.balance(artifact.get(field)) >= int(amount)

            steps.append(WiringStep(f"seed_{field}", (field,), seed, applied=funded, deferred=True))
        return steps


# astroport factory, only used to create the BRO/UST pair
class AstroFactory(Contract):
    name = "bro_ust_pair"
    config_key = "bro_ust_pair"
    address_fields = {"contract_addr": "bro_token"}

    def __init__(self, client: Any, config: dict[str, Any], artifact: Artifact):
        super().__init__(client, config, artifact)
        self.factory_address = self.config.get("factory_address") or ""
        if not self.factory_address:
            field = "bro_ust_pair.factory_address"
            raise MissingDependencyError(field, hint_for(field), required_by=self.name)
        self.lp_token = artifact.get("bro_ust_lp_token")

    @property
    def outputs(self) -> tuple[str, ...]:
        return ("bro_ust_pair", "bro_ust_lp_token")

    def create_pair_msg(self, artifact: Artifact) -> dict[str, Any]:
        asset_infos = [
            AssetInfo.cw20(self.require(artifact, "bro_token")),
            AssetInfo.native(UST_DENOM),
        ]
        return {
            "create_pair": {
                "pair_type": {"xyk": {}},
                "asset_infos": [info.as_msg() for info in asset_infos],
            }
        }

    def deploy(self, admin: str, artifact: Artifact, code_ids: dict[str, int]) -> Optional[int]:
        result = self.client.execute(self.factory_address, self.create_pair_msg(artifact))
        self.address = event_attribute(result, "from_contract", "pair_contract_addr")
        self.lp_token = event_attribute(result, "from_contract", "liquidity_token_addr")
        logger.info(f"BRO/UST pair created. Pair address: {self.address}")
        return None

    def set_artifact_data(self, artifact: Artifact) -> None:
        artifact.bro_ust_pair = self.address
        artifact.bro_ust_lp_token = self.lp_token


# oracle
class Oracle(Contract):
    name = "oracle"
    wasm = "brotocol_oracle.wasm"
    config_key = "oracle"
    message_model = OracleInstantiateMsg

    def __init__(self, client: Any, config: dict[str, Any], artifact: Artifact):
        super().__init__(client, config, artifact)
        self.factory_address = (config.get("bro_ust_pair") or {}).get("factory_address") or ""
        if not self.factory_address:
            field = "bro_ust_pair.factory_address"
            raise MissingDependencyError(field, hint_for(field), required_by=self.name)

    def dependencies(self) -> tuple[str, ...]:
        return ("bro_token",)

    def message_data(self, artifact: Artifact) -> dict[str, Any]:
        data = super().message_data(artifact)
        data["factory_contract"] = self.factory_address
        data["asset_infos"] = [
            AssetInfo.cw20(self.require(artifact, "bro_token")).as_msg(),
            AssetInfo.native(UST_DENOM).as_msg(),
        ]
        return data


# airdrop
class Airdrop(Contract):
    name = "airdrop"
    wasm = "brotocol_airdrop.wasm"
    config_key = "airdrop"
    message_model = AirdropInstantiateMsg
    address_fields = {"bro_token": "bro_token"}


# vesting
class Vesting(Contract):
    name = "vesting"
    wasm = "brotocol_vesting.wasm"
    config_key = "vesting"
    message_model = VestingInstantiateMsg
    address_fields = {"bro_token": "bro_token"}


# bbro-minter
class BbroMinter(Contract):
    """Instantiated with the deployer as gov so it can learn bbro-token and minters."""

    name = "bbro_minter"
    wasm = "brotocol_bbro_minter.wasm"
    config_key = "bbro_minter"
    message_model = BbroMinterInstantiateMsg

    def __init__(
        self,
        client: Any,
        config: dict[str, Any],
        artifact: Artifact,
        minters: tuple[str, ...] = ("staking_v1",),
    ):
        super().__init__(client, config, artifact)
        final_owner = self.config.pop("owner", None)
        if not final_owner:
            raise ConfigError("Config section 'bbro_minter' must set 'owner'")
        self.handoff = OwnershipHandoff(self.name, client.sender_address, final_owner)
        self.minters = minters

    def message_data(self, artifact: Artifact) -> dict[str, Any]:
        data = super().message_data(artifact)
        data["gov_contract"] = self.client.sender_address
        return data

    def update_config(self, bbro_token: str) -> None:
        self.client.execute(self.address, {"update_config": {"bbro_token": bbro_token}})

    def add_minter(self, minter: str) -> None:
        self.client.execute(self.address, {"add_minter": {"minter": minter}})

    def wiring(self) -> list[WiringStep]:
        def set_bbro_token(artifact: Artifact) -> None:
            self.update_config(artifact.bbro_token)
            logger.info("Update bbro-token address for bbro-minter success")

        steps = [
            WiringStep(
                "set_bbro_token",
                ("bbro_token",),
                set_bbro_token,
                applied=lambda cfg, artifact: cfg.get("bbro_token") == artifact.bbro_token,
            )
        ]
        for field in self.minters:
            def whitelist(artifact: Artifact, field: str = field) -> None:
                logger.info(f"whitelist {field} in bbro-minter")
                self.add_minter(artifact.get(field))

            steps.append(
                WiringStep(
                    f"add_minter_{field}",
                    (field,),
                    whitelist,
                    applied=lambda cfg, artifact, field=field: artifact.get(field) in cfg.get("whitelist", []),
                )
            )
        steps.append(handoff_step(self))
        return steps


# bbro-token
class BbroToken(Contract):
    name = "bbro_token"
    wasm = "brotocol_bbro_token.wasm"
    config_key = "bbro_token"
    message_model = Cw20InstantiateMsg

    def dependencies(self) -> tuple[str, ...]:
        return ("bbro_minter",)

    def message_data(self, artifact: Artifact) -> dict[str, Any]:
        data = super().message_data(artifact)
        data["initial_balances"] = []
        data["mint"] = {"minter": self.require(artifact, "bbro_minter")}
        return data


# rewards pool
class RewardsPool(Contract):
    """Instantiated with the deployer as gov so the distributor can be whitelisted."""

    name = "rewards_pool"
    wasm = "brotocol_rewards_pool.wasm"
    config_key = "rewards"
    message_model = RewardsPoolInstantiateMsg
    address_fields = {"bro_token": "bro_token"}

    def __init__(
        self,
        client: Any,
        config: dict[str, Any],
        artifact: Artifact,
        distributors: tuple[str, ...] = ("distributor_v1",),
    ):
        super().__init__(client, config, artifact)
        final_owner = self.config.pop("owner", None)
        if not final_owner:
            raise ConfigError("Config section 'rewards' must set 'owner'")
        self.handoff = OwnershipHandoff(self.name, client.sender_address, final_owner)
        self.distributors = distributors

    def message_data(self, artifact: Artifact) -> dict[str, Any]:
        data = super().message_data(artifact)
        data["gov_contract"] = self.client.sender_address
        return data

    def add_distributor(self, address: str) -> None:
        self.client.execute(self.address, {"add_distributor": {"distributor": address}})

    def wiring(self) -> list[WiringStep]:
        steps = []
        for field in self.distributors:
            def whitelist(artifact: Artifact, field: str = field) -> None:
                logger.info(f"whitelist {field} in rewards pool")
                self.add_distributor(artifact.get(field))

            steps.append(
                WiringStep(
                    f"add_distributor_{field}",
                    (field,),
                    whitelist,
                    applied=lambda cfg, artifact, field=field: artifact.get(field) in cfg.get("whitelist", []),
                )
            )
        steps.append(handoff_step(self))
        return steps


def handoff_step(contract: Contract) -> WiringStep:
    """Final wiring step moving gov from the deployer to the configured owner."""
    handoff = contract.handoff

    def move_ownership(artifact: Artifact) -> None:
        logger.info(f"move ownership of {contract.name} to configured owner {handoff.final_owner}")
        handoff.transfer(contract.client, contract.address)

    return WiringStep(
        "move_ownership",
        (),
        move_ownership,
        applied=lambda cfg, artifact: handoff.is_final,
        last=True,
    )


# treasuries
class MvpTreasury(Contract):
    name = "mvp_treasury"
    wasm = "brotocol_mvp_treasury.wasm"
    config_key = "treasury"
    message_model = TreasuryInstantiateMsg


class IdoTreasury(MvpTreasury):
    name = "ido_treasury"
    config_key = "ido_treasury"


class OpReserveTreasury(MvpTreasury):
    name = "op_reserve_treasury"
    config_key = "op_reserve_treasury"


# token pool
class TokenPool(Contract):
    name = "token_pool"
    wasm = "brotocol_token_pool.wasm"
    config_key = "token_pool"
    message_model = TokenPoolInstantiateMsg
    address_fields = {"bro_token": "bro_token"}


# epoch manager
class EpochManager(Contract):
    name = "epoch_manager"
    wasm = "brotocol_epoch_manager.wasm"
    config_key = "epoch_manager"
    message_model = EpochManagerInstantiateMsg


# staking v1
class StakingV1(Contract):
    name = "staking_v1"
    wasm = "brotocol_staking_v1.wasm"
    config_key = "stakingv1"
    message_model = StakingInstantiateMsg
    address_fields = {
        "bro_token": "bro_token",
        "rewards_pool_contract": "rewards_pool",
        "bbro_minter_contract": "bbro_minter",
        "epoch_manager_contract": "epoch_manager",
    }

    def message_data(self, artifact: Artifact) -> dict[str, Any]:
        data = super().message_data(artifact)
        # empty string in config means the community bonding option is disabled
        if not data.get("community_bonding_contract"):
            data.pop("community_bonding_contract", None)
        return data


# bonding v1
class BondingV1(Contract):
    name = "bonding_v1"
    wasm = "brotocol_bonding_v1.wasm"
    config_key = "bondingv1"
    message_model = BondingInstantiateMsg
    address_fields = {
        "bro_token": "bro_token",
        "rewards_pool_contract": "rewards_pool",
        "treasury_contract": "mvp_treasury",
        "oracle_contract": "oracle",
    }
    MODES: ClassVar[tuple[str, ...]] = ("normal", "community")
    # bonding mode -> {mode message key: artifact field}
    MODE_ADDRESS_FIELDS: ClassVar[dict[str, dict[str, str]]] = {
        "normal": {"lp_token": "bro_ust_lp_token"},
        "community": {"staking_contract": "staking_v1"},
    }

    def __init__(self, client: Any, config: dict[str, Any], artifact: Artifact):
        super().__init__(client, config, artifact)
        self.mode, self.mode_config = self.select_mode(self.config.get("bonding_mode"))

    @classmethod
    def select_mode(cls, bonding_mode: Any) -> tuple[str, dict[str, Any]]:
        """Pick the bonding mode from its tag; exactly one known tag is accepted."""
        if not isinstance(bonding_mode, dict):
            raise ConfigError("bondingv1.bonding_mode must be an object tagged 'normal' or 'community'")
        unknown = sorted(set(bonding_mode) - set(cls.MODES))
        if unknown:
            raise ConfigError(f"bondingv1.bonding_mode has unknown mode(s): {', '.join(unknown)}")
        tags = [mode for mode in cls.MODES if mode in bonding_mode]
        if len(tags) != 1:
            raise ConfigError(
                "bondingv1.bonding_mode must specify exactly one of 'normal' or 'community', "
                f"got {len(tags)}"
            )
        mode = tags[0]
        return mode, dict(bonding_mode[mode] or {})

    def dependencies(self) -> tuple[str, ...]:
        return super().dependencies() + tuple(self.MODE_ADDRESS_FIELDS[self.mode].values())

    def message_data(self, artifact: Artifact) -> dict[str, Any]:
        data = super().message_data(artifact)
        mode_data = dict(self.mode_config)
        for key, field in self.MODE_ADDRESS_FIELDS[self.mode].items():
            mode_data[key] = self.require(artifact, field)
        data["bonding_mode"] = {self.mode: mode_data}
        return data


# whitelist sale
class WhitelistSale(Contract):
    name = "whitelist_sale"
    wasm = "brotocol_whitelist_sale.wasm"
    config_key = "whitelist_sale"
    message_model = WhitelistSaleInstantiateMsg
    address_fields = {
        "bro_token": "bro_token",
        "rewards_pool_contract": "rewards_pool",
    }


# distributor v1
class DistributorV1(Contract):
    name = "distributor_v1"
    wasm = "brotocol_distributor_v1.wasm"
    config_key = "distributorv1"
    message_model = DistributorInstantiateMsg
    address_fields = {
        "epoch_manager_contract": "epoch_manager",
        "rewards_contract": "rewards_pool",
        "staking_contract": "staking_v1",
        "bonding_contract": "bonding_v1",
    }
