import copy
import itertools
import json
from types import SimpleNamespace

import pytest

from brodeploy.config.settings import Settings
from brodeploy.exceptions import ChainTransactionError
from brodeploy.helpers.artifact_store import ArtifactStore

BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
NETWORK = "localterra"


def addr(n: int) -> str:
    body = ""
    while True:
        body = BECH32_CHARSET[n % 32] + body
        n //= 32
        if n == 0:
            break
    return "terra1" + body.rjust(38, "q")


DEPLOYER = "terra1" + "d" * 38
ADMIN = "terra1" + "a" * 38
OWNER = "terra1" + "w" * 38
FACTORY = "terra1" + "f" * 38


class FakeClient:
    """Stands in for TerraClient and records every chain call."""

    # shared so addresses stay unique across clients within a test
    _addresses = itertools.count(1000)

    def __init__(self, sender=DEPLOYER, fail_on=None):
        self.sender_address = sender
        self.fail_on = fail_on
        self.calls = []
        self.configs = {}
        # BRO balance per holder address
        self.balances = {}
        self._code_ids = itertools.count(1)
        self._wasm_by_code = {}

    def store_code(self, wasm_file):
        code_id = next(self._code_ids)
        self._wasm_by_code[code_id] = wasm_file
        self.calls.append(("store_code", wasm_file))
        return code_id

    def instantiate(self, admin, code_id, msg, funds=None):
        wasm = self._wasm_by_code[code_id]
        if wasm == self.fail_on:
            raise ChainTransactionError(f"instantiate code_id {code_id}", 5, "wasm", "out of gas")
        address = addr(next(self._addresses))
        self.calls.append(("instantiate", wasm, msg, address, admin))
        return address

    def execute(self, address, msg, funds=None):
        self.calls.append(("execute", address, msg))
        if "create_pair" in msg:
            attrs = {
                "pair_contract_addr": [addr(900)],
                "liquidity_token_addr": [addr(901)],
            }
            return SimpleNamespace(logs=[SimpleNamespace(events_by_type={"from_contract": attrs})])
        if "transfer" in msg:
            recipient = msg["transfer"]["recipient"]
            self.balances[recipient] = self.balances.get(recipient, 0) + int(msg["transfer"]["amount"])
        return SimpleNamespace(code=0, logs=[])

    def query(self, address, msg):
        self.calls.append(("query", address, msg))
        if "balance" in msg:
            return {"balance": str(self.balances.get(msg["balance"]["address"], 0))}
        if "token_info" in msg:
            return {"name": "Brotocol Token", "symbol": "BRO", "decimals": 6}
        return copy.deepcopy(self.configs[address])

    def transfers(self):
        return [msg["transfer"] for _, msg in self.executed() if "transfer" in msg]

    def kinds(self, kind):
        return [c for c in self.calls if c[0] == kind]

    def instantiated_wasm(self):
        return [c[1] for c in self.kinds("instantiate")]

    def executed(self):
        return [(c[1], c[2]) for c in self.kinds("execute")]


def make_config(holder=DEPLOYER):
    return {
        "deployToken": True,
        "initialBroBalanceHolderAddress": holder,
        "bro_token": {"name": "Brotocol Token", "symbol": "BRO", "decimals": 6},
        "bro_ust_pair": {"createPair": True, "factory_address": FACTORY},
        "oracle": {"owner": OWNER, "price_update_interval": 60, "price_validity_period": 120},
        "airdrop": {"owner": OWNER},
        "vesting": {"owner": OWNER, "genesis_time": 1651363200},
        "bbro_minter": {"owner": OWNER, "whitelist": []},
        "bbro_token": {"name": "Brotocol bBRO Token", "symbol": "bBRO", "decimals": 6},
        "rewards": {"owner": OWNER, "spend_limit": 1000000000000, "whitelist": []},
        "treasury": {"owner": OWNER},
        "ido_treasury": {"owner": OWNER},
        "op_reserve_treasury": {"owner": OWNER},
        "token_pool": {"owner": OWNER},
        "epoch_manager": {"epoch": 14400, "blocks_per_year": 5256000, "bbro_emission_rate": "1.0"},
        "stakingv1": {
            "owner": OWNER,
            "community_bonding_contract": "",
            "unstake_period_blocks": 201600,
            "min_staking_amount": "0",
            "min_lockup_period_epochs": 1,
            "max_lockup_period_epochs": 365,
            "base_rate": "0.0001",
            "linear_growth": "0.0005",
            "exponential_growth": "0.0000075",
        },
        "bondingv1": {
            "owner": OWNER,
            "astroport_factory": FACTORY,
            "ust_bonding_discount": "0.1",
            "min_bro_payout": "1",
            "bonding_mode": {
                "normal": {
                    "ust_bonding_reward_ratio": "0.6",
                    "lp_bonding_discount": "0.05",
                    "vesting_period_blocks": 100800,
                }
            },
        },
        "whitelist_sale": {
            "owner": OWNER,
            "bro_amount_per_uusd": "10",
            "bro_amount_per_nft": "1000000000",
            "ust_receiver": OWNER,
        },
        "distributorv1": {
            "staking_distribution_amount": "100000000",
            "bonding_distribution_amount": "100000000",
        },
        "bro_distributions": {
            "airdrop": "10000000000000",
            "vesting": "100000000000000",
            "rewards": "500000000000000",
        },
    }


def write_config(config_dir, config, network=NETWORK):
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / f"{network}.json").write_text(json.dumps(config))


def write_artifact(artifacts_dir, data, network=NETWORK):
    artifacts_dir.mkdir(parents=True, exist_ok=True)
    (artifacts_dir / f"{network}.json").write_text(json.dumps(data))


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def settings(tmp_path, config):
    write_config(tmp_path / "config", config)
    return Settings(
        network_id=NETWORK,
        admin_address=ADMIN,
        settle_delay=0,
        config_dir=tmp_path / "config",
        artifacts_dir=tmp_path / "artifacts",
        wasm_dir=tmp_path / "wasm",
    )


@pytest.fixture
def store(settings):
    return ArtifactStore(settings.artifacts_dir)


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture
def core_prereqs():
    """Artifact fields the core flow expects from the token and pair flows."""
    return {
        "bro_token": addr(500),
        "oracle": addr(501),
        "bro_ust_pair": addr(502),
        "bro_ust_lp_token": addr(503),
    }
