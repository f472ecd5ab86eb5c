from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet

from intranet_platform.config import Config


@dataclass(frozen=True)
class RouteClassifier:
    """Decides which request paths skip authentication.

    Matching is exact: no prefixes, wildcards or trailing-slash folding.
    """

    public_paths: FrozenSet[str]

    def is_public(self, path: str) -> bool:
        return path in self.public_paths

    @classmethod
    def from_config(cls, cfg: Config) -> "RouteClassifier":
        return cls(
            public_paths=frozenset(
                (cfg.PATH_ROOT, cfg.PATH_STATIC, cfg.PATH_METADATA, cfg.path_login)
            )
        )
