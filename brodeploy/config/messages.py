"""
Instantiate message schemas for every contract brodeploy deploys.

Each model mirrors the contract's ``InstantiateMsg`` exactly: unknown keys are
rejected, address fields must be bech32 strings, Uint128/Decimal values are
carried as JSON strings the way CosmWasm expects them.
"""

from __future__ import annotations

import decimal
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    NonNegativeInt,
    StringConstraints,
    ValidationError,
    model_validator,
)

from brodeploy.exceptions import InvalidMessageError


def _uint_to_str(value: Any) -> Any:
    # JSON configs sometimes carry amounts as numbers; contracts want strings.
    if isinstance(value, float):
        raise ValueError("amounts must be integers or digit strings, not floats")
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _decimal_to_str(value: Any) -> Any:
    # repr keeps the shortest exact digits; "f" avoids exponent notation
    if isinstance(value, float):
        return format(decimal.Decimal(repr(value)), "f")
    return _uint_to_str(value)


Address = Annotated[str, StringConstraints(pattern=r"^[a-z]+1[02-9ac-hj-np-z]{38,58}$")]
Uint128 = Annotated[str, StringConstraints(pattern=r"^\d+$"), BeforeValidator(_uint_to_str)]
Decimal = Annotated[str, StringConstraints(pattern=r"^\d+(\.\d+)?$"), BeforeValidator(_decimal_to_str)]


class Msg(BaseModel):
    """Strict base for contract messages."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    def as_msg(self) -> dict[str, Any]:
        """JSON-ready dict; unset optional fields are omitted like serde's ``Option``."""
        return self.model_dump(mode="json", exclude_none=True)


def validate_msg(model: type[Msg], data: dict[str, Any], contract: str) -> Msg:
    """Validate ``data`` against ``model`` and raise InvalidMessageError on failure."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidMessageError(contract, str(e))


# =============================================================================
# CW20 TOKENS
# =============================================================================

class Cw20Coin(Msg):
    address: Address
    amount: Uint128


class MinterResponse(Msg):
    minter: Address
    cap: Optional[Uint128] = None


class Cw20InstantiateMsg(Msg):
    name: Annotated[str, StringConstraints(min_length=3, max_length=50)]
    symbol: Annotated[str, StringConstraints(pattern=r"^[a-zA-Z\-]{3,12}$")]
    decimals: Annotated[int, Field(ge=0, le=18)]
    initial_balances: list[Cw20Coin]
    mint: Optional[MinterResponse] = None
    marketing: Optional[dict[str, Any]] = None


# =============================================================================
# ASSET INFO (astroport)
# =============================================================================

class TokenInfo(Msg):
    contract_addr: Address


class NativeTokenInfo(Msg):
    denom: str


class AssetInfo(Msg):
    """Either ``{"token": {...}}`` or ``{"native_token": {...}}``."""

    token: Optional[TokenInfo] = None
    native_token: Optional[NativeTokenInfo] = None

    @model_validator(mode="after")
    def _exactly_one(self):
        if (self.token is None) == (self.native_token is None):
            raise ValueError("asset info must be exactly one of 'token' or 'native_token'")
        return self

    @classmethod
    def cw20(cls, contract_addr: str) -> AssetInfo:
        return cls(token={"contract_addr": contract_addr})

    @classmethod
    def native(cls, denom: str) -> AssetInfo:
        return cls(native_token={"denom": denom})


# =============================================================================
# BROTOCOL CONTRACTS
# =============================================================================

class OracleInstantiateMsg(Msg):
    owner: Address
    factory_contract: Address
    asset_infos: tuple[AssetInfo, AssetInfo]
    price_update_interval: NonNegativeInt
    price_validity_period: NonNegativeInt


class AirdropInstantiateMsg(Msg):
    owner: Address
    bro_token: Address


class VestingInstantiateMsg(Msg):
    owner: Address
    bro_token: Address
    genesis_time: NonNegativeInt


class BbroMinterInstantiateMsg(Msg):
    gov_contract: Address
    whitelist: list[Address] = Field(default_factory=list)


class RewardsPoolInstantiateMsg(Msg):
    gov_contract: Address
    bro_token: Address
    spend_limit: Uint128
    whitelist: list[Address] = Field(default_factory=list)


class TreasuryInstantiateMsg(Msg):
    owner: Address


class TokenPoolInstantiateMsg(Msg):
    owner: Address
    bro_token: Address


class EpochManagerInstantiateMsg(Msg):
    epoch: NonNegativeInt
    blocks_per_year: NonNegativeInt
    bbro_emission_rate: Decimal


class StakingInstantiateMsg(Msg):
    owner: Address
    bro_token: Address
    rewards_pool_contract: Address
    bbro_minter_contract: Address
    epoch_manager_contract: Address
    community_bonding_contract: Optional[Address] = None
    unstake_period_blocks: NonNegativeInt
    min_staking_amount: Uint128
    min_lockup_period_epochs: NonNegativeInt
    max_lockup_period_epochs: NonNegativeInt
    base_rate: Decimal
    linear_growth: Decimal
    exponential_growth: Decimal


class NormalBondingMode(Msg):
    ust_bonding_reward_ratio: Decimal
    lp_token: Address
    lp_bonding_discount: Decimal
    vesting_period_blocks: NonNegativeInt


class CommunityBondingMode(Msg):
    staking_contract: Address
    epochs_locked: NonNegativeInt


class BondingModeMsg(Msg):
    """Tagged variant: ``{"normal": {...}}`` or ``{"community": {...}}``."""

    normal: Optional[NormalBondingMode] = None
    community: Optional[CommunityBondingMode] = None

    @model_validator(mode="after")
    def _exactly_one(self):
        if (self.normal is None) == (self.community is None):
            raise ValueError("bonding_mode must be exactly one of 'normal' or 'community'")
        return self


class BondingInstantiateMsg(Msg):
    owner: Address
    bro_token: Address
    rewards_pool_contract: Address
    treasury_contract: Address
    astroport_factory: Address
    oracle_contract: Address
    ust_bonding_discount: Decimal
    min_bro_payout: Uint128
    bonding_mode: BondingModeMsg


class WhitelistSaleInstantiateMsg(Msg):
    owner: Address
    bro_token: Address
    bro_amount_per_uusd: Uint128
    bro_amount_per_nft: Uint128
    ust_receiver: Address
    rewards_pool_contract: Address


class DistributorInstantiateMsg(Msg):
    epoch_manager_contract: Address
    rewards_contract: Address
    staking_contract: Address
    staking_distribution_amount: Uint128
    bonding_contract: Address
    bonding_distribution_amount: Uint128
