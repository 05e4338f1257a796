"""
Terra chain client - thin wrapper over terra_sdk.

Public API
----------
TerraClient(settings)
    store_code / instantiate / execute / query, each followed by a fixed
    settle delay so the next call sees the new chain state.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Optional

from terra_sdk.client.lcd import LCDClient
from terra_sdk.client.lcd.api.tx import CreateTxOptions
from terra_sdk.client.localterra import LocalTerra
from terra_sdk.core.coins import Coins
from terra_sdk.core.wasm import MsgExecuteContract, MsgInstantiateContract, MsgStoreCode
from terra_sdk.key.mnemonic import MnemonicKey
from terra_sdk.util.contract import get_code_id, get_contract_address, read_file_as_b64

from brodeploy.config.settings import LOCALTERRA_MNEMONIC, Settings
from brodeploy.exceptions import ChainTransactionError

__all__ = ["TerraClient"]

logger = logging.getLogger(__name__)


class TerraClient:
    """Signs and broadcasts wasm transactions from one wallet."""

    def __init__(self, settings: Settings, lcd: Any = None, wallet: Any = None):
        self.settings = settings
        self.wasm_dir = Path(settings.wasm_dir)
        self.settle_delay = settings.settle_delay

        if lcd is None:
            if settings.uses_local_terra:
                lcd = LocalTerra()
            else:
                lcd = LCDClient(
                    url=settings.lcd_url,
                    chain_id=settings.network_id,
                    gas_prices=settings.gas_prices,
                    gas_adjustment=settings.gas_adjustment,
                )
        self.terra = lcd

        if wallet is None:
            wallet = self.terra.wallet(MnemonicKey(mnemonic=settings.mnemonic or LOCALTERRA_MNEMONIC))
        self.wallet = wallet

    @property
    def sender_address(self) -> str:
        return self.wallet.key.acc_address

    def store_code(self, wasm_file: str) -> int:
        """Upload ``wasm_file`` from the wasm directory and return its code id."""
        msg = MsgStoreCode(self.sender_address, read_file_as_b64(str(self.wasm_dir / wasm_file)))
        result = self._broadcast(msg, f"store code {wasm_file}")
        code_id = int(get_code_id(result))
        logger.info(f"{wasm_file} store code success. code_id: {code_id}")
        return code_id

    def instantiate(
        self,
        admin: str,
        code_id: int,
        msg: dict[str, Any],
        funds: Optional[dict[str, int]] = None,
    ) -> str:
        """Instantiate ``code_id`` with ``admin`` as migration admin; return the address."""
        instantiate_msg = MsgInstantiateContract(
            self.sender_address,
            admin,
            code_id,
            msg,
            Coins(funds) if funds else Coins(),
        )
        result = self._broadcast(instantiate_msg, f"instantiate code_id {code_id}")
        address = get_contract_address(result)
        logger.info(f"Instantiate contract with code_id {code_id} success. Contract address: {address}")
        return address

    def execute(self, address: str, msg: dict[str, Any], funds: Optional[dict[str, int]] = None) -> Any:
        execute_msg = MsgExecuteContract(
            self.sender_address,
            address,
            msg,
            Coins(funds) if funds else Coins(),
        )
        action = next(iter(msg), "execute")
        return self._broadcast(execute_msg, f"execute {action} on {address}")

    def query(self, address: str, msg: dict[str, Any]) -> Any:
        result = self.terra.wasm.contract_query(address, msg)
        time.sleep(self.settle_delay)
        return result

    def _broadcast(self, msg: Any, action: str) -> Any:
        tx = self.wallet.create_and_sign_tx(CreateTxOptions(msgs=[msg]))
        result = self.terra.tx.broadcast(tx)
        time.sleep(self.settle_delay)
        self._raise_on_error(result, action)
        return result

    @staticmethod
    def _raise_on_error(result: Any, action: str) -> None:
        code = getattr(result, "code", None)
        if code:
            raise ChainTransactionError(
                action,
                code,
                getattr(result, "codespace", None),
                getattr(result, "raw_log", None),
            )
