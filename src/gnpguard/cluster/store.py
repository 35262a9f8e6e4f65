"""
Read-only view of the GKENetworkParamSet collection.

Stands in for the informer lister: the validator receives one explicitly,
so tests can hand it a fixed set of siblings.
"""

import logging
from typing import Dict, Iterable, List

from gnpguard.core.errors import ResourceNotFoundError
from gnpguard.core.models import ParamSet

logger = logging.getLogger("gnpguard.store")


class ParamSetStore:

    def __init__(self, params: Iterable[ParamSet] = ()):
        self._items: Dict[str, ParamSet] = {}
        for p in params:
            if p.name in self._items:
                logger.warning(f"Duplicate GKENetworkParamSet '{p.name}'; keeping the last one seen.")
            self._items[p.name] = p

    def list(self) -> List[ParamSet]:
        """Point-in-time snapshot of every parameter set in the cluster."""
        return list(self._items.values())

    def get(self, name: str) -> ParamSet:
        try:
            return self._items[name]
        except KeyError:
            raise ResourceNotFoundError("GKENetworkParamSet", name) from None

    def __len__(self):
        return len(self._items)
