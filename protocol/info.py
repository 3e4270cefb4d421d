"""
InstanceInfo - identity of a probed PostgreSQL instance.

Handed to the registration client; it has no identity of its own and is
built fresh on every probe.
"""

import json
from dataclasses import asdict, dataclass
from typing import Dict


DISTRO = "PostgreSQL"


@dataclass(frozen=True)
class InstanceInfo:
    """Normalized instance descriptor."""
    hostname: str
    port: str
    distro: str = DISTRO
    version: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
