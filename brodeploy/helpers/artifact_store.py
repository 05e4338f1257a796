"""
Artifact store - persisted addresses of already-deployed contracts.

One JSON file per network id (``<directory>/<network_id>.json``). A missing
file reads as an empty artifact; writes replace the whole file atomically.
"""
from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

__all__ = ["ARTIFACT_FIELDS", "Artifact", "ArtifactStore", "write_json_atomic"]


@dataclass
class Artifact:
    """Deployed address per contract; an empty string means not deployed yet."""

    network: str = ""
    bro_token: str = ""
    airdrop: str = ""
    vesting: str = ""
    bbro_minter: str = ""
    bbro_token: str = ""
    rewards_pool: str = ""
    mvp_treasury: str = ""
    ido_treasury: str = ""
    op_reserve_treasury: str = ""
    token_pool: str = ""
    epoch_manager: str = ""
    staking_v1: str = ""
    bonding_v1: str = ""
    distributor_v1: str = ""
    whitelist_sale: str = ""
    oracle: str = ""
    bro_ust_pair: str = ""
    bro_ust_lp_token: str = ""
    # keys found on disk that this version does not know about
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    def get(self, name: str) -> str:
        if name not in ARTIFACT_FIELDS:
            raise KeyError(f"Unknown artifact field: {name}")
        return getattr(self, name)

    def set(self, name: str, address: str) -> None:
        if name not in ARTIFACT_FIELDS:
            raise KeyError(f"Unknown artifact field: {name}")
        setattr(self, name, address)

    def has(self, name: str) -> bool:
        return bool(self.get(name))

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data.update({name: getattr(self, name) for name in ARTIFACT_FIELDS})
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Artifact:
        known = {k: ("" if v is None else str(v)) for k, v in data.items() if k in ARTIFACT_FIELDS}
        extra = {k: v for k, v in data.items() if k not in ARTIFACT_FIELDS}
        return cls(**known, extra=extra)


ARTIFACT_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(Artifact) if f.name != "extra")


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(prefix=f"{path.stem}_", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(tmp_fd, "w") as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


class ArtifactStore:
    """Loads and persists artifacts under one directory."""

    def __init__(self, directory: Path = Path("artifacts")):
        self.directory = Path(directory)

    def path_for(self, network_id: str) -> Path:
        return self.directory / f"{network_id}.json"

    def load(self, network_id: str) -> Artifact:
        path = self.path_for(network_id)
        if not path.exists():
            return Artifact()
        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Artifact file {path} must contain a JSON object")
        return Artifact.from_dict(data)

    def write(self, artifact: Artifact, network_id: str) -> Path:
        path = self.path_for(network_id)
        write_json_atomic(path, artifact.to_dict())
        return path
