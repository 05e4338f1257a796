import pytest

from brodeploy.exceptions import ConfigError, InvalidMessageError, MissingDependencyError
from brodeploy.helpers.artifact_store import Artifact
from brodeploy.setup.contracts import (
    INITIAL_BRO_BALANCE,
    AstroFactory,
    BbroMinter,
    BbroToken,
    BondingV1,
    BroToken,
    EpochManager,
    IdoTreasury,
    MvpTreasury,
    Oracle,
    RewardsPool,
    StakingV1,
)

from conftest import DEPLOYER, FACTORY, OWNER, addr, make_config


@pytest.fixture
def deployed():
    return Artifact(
        bro_token=addr(500),
        oracle=addr(501),
        bro_ust_lp_token=addr(503),
        rewards_pool=addr(510),
        mvp_treasury=addr(511),
        staking_v1=addr(512),
        bbro_minter=addr(513),
        epoch_manager=addr(514),
    )


def test_bro_token_mints_initial_balance_to_holder(client):
    token = BroToken(client, make_config(holder=OWNER), Artifact())

    msg = token.instantiate_msg(Artifact()).as_msg()

    assert msg["initial_balances"] == [{"address": OWNER, "amount": str(INITIAL_BRO_BALANCE)}]
    assert token.dependencies() == ()


def test_bro_token_seeds_only_from_deployer(client):
    seeding = BroToken(client, make_config(holder=DEPLOYER), Artifact(), distribute_to=("airdrop", "rewards_pool"))
    foreign = BroToken(client, make_config(holder=OWNER), Artifact(), distribute_to=("airdrop", "rewards_pool"))

    assert [w.name for w in seeding.wiring()] == ["seed_airdrop", "seed_rewards_pool"]
    assert all(w.deferred for w in seeding.wiring())
    assert foreign.wiring() == []


def test_seed_counts_as_applied_once_recipient_is_funded(client):
    token = BroToken(client, make_config(), Artifact(bro_token=addr(500)), distribute_to=("airdrop",))
    artifact = Artifact(airdrop=addr(600))
    (seed,) = token.wiring()

    assert not seed.applied({}, artifact)
    client.balances[addr(600)] = 10000000000000
    assert seed.applied({}, artifact)
    assert client.kinds("query")[-1] == ("query", addr(500), {"balance": {"address": addr(600)}})


def test_bbro_token_minter_is_bbro_minter(client, deployed):
    msg = BbroToken(client, make_config(), deployed).instantiate_msg(deployed).as_msg()

    assert msg["mint"] == {"minter": addr(513)}
    assert msg["initial_balances"] == []


def test_bbro_minter_starts_owned_by_deployer(client, deployed):
    minter = BbroMinter(client, make_config(), deployed)

    msg = minter.instantiate_msg(deployed).as_msg()

    assert msg["gov_contract"] == DEPLOYER
    assert "owner" not in msg
    assert minter.handoff.final_owner == OWNER
    assert [w.name for w in minter.wiring()] == ["set_bbro_token", "add_minter_staking_v1", "move_ownership"]


def test_ownable_contract_needs_configured_owner(client):
    config = make_config()
    del config["rewards"]["owner"]

    with pytest.raises(ConfigError, match="rewards"):
        RewardsPool(client, config, Artifact())


def test_treasuries_share_bytecode(client):
    config = make_config()

    assert MvpTreasury(client, config, Artifact()).wasm == IdoTreasury(client, config, Artifact()).wasm
    assert IdoTreasury.name == "ido_treasury"


def test_staking_drops_empty_community_bonding(client, deployed):
    msg = StakingV1(client, make_config(), deployed).instantiate_msg(deployed).as_msg()

    assert "community_bonding_contract" not in msg
    assert msg["bbro_minter_contract"] == addr(513)
    assert msg["epoch_manager_contract"] == addr(514)


def test_missing_read_is_reported_before_chain(client):
    artifact = Artifact(bro_token=addr(500))
    staking = StakingV1(client, make_config(), artifact)

    with pytest.raises(MissingDependencyError) as exc:
        staking.instantiate_msg(artifact)

    assert exc.value.field == "rewards_pool"
    assert client.calls == []


def test_invalid_config_value_fails_validation(client, deployed):
    config = make_config()
    config["epoch_manager"]["bbro_emission_rate"] = "fast"

    with pytest.raises(InvalidMessageError):
        EpochManager(client, config, deployed).instantiate_msg(deployed)


def test_bonding_normal_mode_uses_lp_token(client, deployed):
    bonding = BondingV1(client, make_config(), deployed)

    msg = bonding.instantiate_msg(deployed).as_msg()

    assert bonding.mode == "normal"
    assert "bro_ust_lp_token" in bonding.dependencies()
    assert msg["bonding_mode"]["normal"]["lp_token"] == addr(503)
    assert msg["treasury_contract"] == addr(511)
    assert msg["oracle_contract"] == addr(501)


def test_bonding_community_mode_uses_staking(client, deployed):
    config = make_config()
    config["bondingv1"]["bonding_mode"] = {"community": {"epochs_locked": 4}}
    bonding = BondingV1(client, config, deployed)

    msg = bonding.instantiate_msg(deployed).as_msg()

    assert bonding.mode == "community"
    assert "staking_v1" in bonding.dependencies()
    assert "bro_ust_lp_token" not in bonding.dependencies()
    assert msg["bonding_mode"] == {"community": {"epochs_locked": 4, "staking_contract": addr(512)}}


@pytest.mark.parametrize(
    "mode",
    [{}, {"normal": {}, "community": {}}, {"reverse": {}}, None],
    ids=["neither", "both", "unknown", "absent"],
)
def test_bonding_mode_rejected_at_construction(client, mode):
    config = make_config()
    config["bondingv1"]["bonding_mode"] = mode

    with pytest.raises(ConfigError):
        BondingV1(client, config, Artifact())
    assert client.calls == []


def test_oracle_pairs_bro_with_uusd(client, deployed):
    msg = Oracle(client, make_config(), deployed).instantiate_msg(deployed).as_msg()

    assert msg["factory_contract"] == FACTORY
    assert msg["asset_infos"] == [
        {"token": {"contract_addr": addr(500)}},
        {"native_token": {"denom": "uusd"}},
    ]


def test_pair_creation_needs_factory(client):
    config = make_config()
    config["bro_ust_pair"]["factory_address"] = ""

    with pytest.raises(MissingDependencyError, match="astro-factory"):
        AstroFactory(client, config, Artifact())


def test_pair_creation_records_pair_and_lp_token(client):
    artifact = Artifact(bro_token=addr(500))
    factory = AstroFactory(client, make_config(), artifact)

    assert factory.deploy(DEPLOYER, artifact, {}) is None
    factory.set_artifact_data(artifact)

    assert artifact.bro_ust_pair == addr(900)
    assert artifact.bro_ust_lp_token == addr(901)
    address, msg = client.executed()[0]
    assert address == FACTORY
    assert msg["create_pair"]["asset_infos"][1] == {"native_token": {"denom": "uusd"}}
