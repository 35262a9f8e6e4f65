#!/usr/bin/env python3
"""
GNPGUARD SETTINGS
-----------------
Engine settings. Values come from the cloud inventory first and are then
overridden by whatever the user passed on the command line.

Author: GNPGuard Team
Date: 2026-10-19
"""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class EngineSettings:
    region: str = ""
    shared_vpc: bool = False        # cross-project (XPN) network
    network_url: str = ""           # the cluster's own network

    def override(self, region: Optional[str] = None, shared_vpc: Optional[bool] = None,
                 network_url: Optional[str] = None) -> "EngineSettings":
        """Returns a copy with every non-None argument applied."""
        changes = {
            "region": region,
            "shared_vpc": shared_vpc,
            "network_url": network_url,
        }
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
