"""
Schema agreement polling for cschema.

Schema changes propagate to the other nodes asynchronously. After every
change the manager polls the cluster until all nodes report one schema
version, optionally giving up after a deadline.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .definitions import KEEP
from ..exceptions import SchemaAgreementTimeoutError, ValidationError


logger = logging.getLogger(__name__)

UNREACHABLE = "UNREACHABLE"


@dataclass
class SchemaVersionView:
    """Snapshot of schema version id to the nodes reporting it."""

    versions: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def version_count(self) -> int:
        return len(self.versions)

    @property
    def is_agreed(self) -> bool:
        """True when exactly one version is reported."""
        return self.version_count == 1

    @property
    def agreed_version(self) -> Optional[str]:
        if not self.is_agreed:
            return None
        return next(iter(self.versions))

    @property
    def unreachable_nodes(self) -> List[str]:
        return list(self.versions.get(UNREACHABLE, []))


class SchemaAgreementPoller:
    """Blocks until the cluster reports a single schema version."""

    def __init__(
        self,
        transport,
        interval: float = 0.1,
        timeout: Optional[float] = None,
    ):
        if interval <= 0:
            raise ValidationError("Poll interval must be positive")
        if timeout is not None and timeout <= 0:
            raise ValidationError("Agreement timeout must be positive")

        self.transport = transport
        self.interval = interval
        self.timeout = timeout
        self.last_poll_count = 0

    async def poll(self) -> SchemaVersionView:
        """Fetch the current version to nodes mapping once."""
        versions = await self.transport.describe_schema_versions()
        return SchemaVersionView(versions={k: list(v) for k, v in versions.items()})

    async def wait_for_agreement(self, timeout=KEEP) -> SchemaVersionView:
        """
        Poll until exactly one schema version is reported.

        Args:
            timeout: Seconds to wait before giving up. ``None`` waits
                indefinitely; omitted uses the poller's default.

        Returns:
            The agreed version view

        Raises:
            SchemaAgreementTimeoutError: If the deadline passes first
            TransportError: If a poll fails; polls are not retried on error
        """
        if timeout is KEEP:
            timeout = self.timeout

        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        polls = 0

        while True:
            view = await self.poll()
            polls += 1
            self.last_poll_count = polls

            if view.is_agreed:
                logger.info(
                    f"Schema agreement reached on {view.agreed_version} after {polls} poll(s)"
                )
                return view

            logger.debug(
                f"Waiting for schema agreement: {view.version_count} versions reported"
            )

            if deadline is not None and loop.time() + self.interval > deadline:
                logger.warning(
                    f"Schema agreement not reached within {timeout}s "
                    f"({view.version_count} versions after {polls} polls)"
                )
                raise SchemaAgreementTimeoutError(timeout, view)

            await asyncio.sleep(self.interval)
