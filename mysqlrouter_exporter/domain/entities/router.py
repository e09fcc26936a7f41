"""
Router Status Entity

Process identity of the MySQL Router instance being sampled.
"""

from dataclasses import dataclass
from datetime import datetime

from ..exceptions import InvalidSnapshotError


@dataclass(frozen=True)
class RouterStatus:
    """
    Identity of the router process.

    Attributes:
        process_id: Operating system pid of the router
        product_edition: Edition string, e.g. "MySQL Community - GPL"
        time_started: When the router process started
        version: Router version, e.g. "8.0.36"
        hostname: Host the router runs on; reused as a label on every
            metadata, route and connection series of the same cycle
    """

    process_id: int
    product_edition: str
    time_started: datetime | None
    version: str
    hostname: str

    def __post_init__(self) -> None:
        if self.process_id < 0:
            raise InvalidSnapshotError("RouterStatus", "process_id", self.process_id, "negative")
