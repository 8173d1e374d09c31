"""
Request and result value types shared by the builders, the transport and the client.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Union


@dataclass(frozen=True)
class OperationRequest:
    """A fully built, validated call: endpoint path plus JSON payload."""
    endpoint_path: str
    payload: Dict[str, Any] = field(default_factory=dict)
    operation: str = ''


@dataclass(frozen=True)
class Success:
    """2xx gateway response, body kept exactly as received."""
    raw_body: str
    status_code: int = 200

    ok = True

    def json(self) -> Any:
        """Parse the body as JSON."""
        return json.loads(self.raw_body)


@dataclass(frozen=True)
class Failure:
    """Non-2xx gateway response; ``diagnostic`` is the raw body."""
    status_code: int
    diagnostic: str

    ok = False

    def json(self) -> Any:
        """Parse the gateway's error envelope, if it is JSON."""
        return json.loads(self.diagnostic)


OperationResult = Union[Success, Failure]
