"""Read-time upgrade of checkpoints written before the TASKS channel.

Checkpoints with ``v < 4`` kept pending sends outside ``channel_values``.
Those sends were also recorded as TASKS writes against the parent
checkpoint, so the channel can be rebuilt from them on read. The result is
returned to the caller and never written back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from graphvault.checkpointers.types import CHECKPOINT_VERSION, TASKS, ChannelVersion, Checkpoint, max_channel_version

logger = logging.getLogger("graphvault.checkpointers")


def needs_upgrade(checkpoint: Checkpoint, parent_checkpoint_id: str | None) -> bool:
    """Legacy checkpoint with a parent to pull sends from."""
    return checkpoint.version < CHECKPOINT_VERSION and parent_checkpoint_id is not None


def upgrade(
    checkpoint: Checkpoint,
    pending_sends: Sequence[Any],
    next_version: Callable[[ChannelVersion | None], ChannelVersion],
) -> Checkpoint:
    """Return a copy of ``checkpoint`` with TASKS rebuilt from ``pending_sends``.

    With no sends the checkpoint is returned as is. The TASKS version is the
    max of the existing channel versions, or a fresh version when there
    are none.
    """
    if not pending_sends:
        return checkpoint

    if checkpoint.channel_versions:
        tasks_version = max_channel_version(*checkpoint.channel_versions.values())
    else:
        tasks_version = next_version(None)

    upgraded = checkpoint.copy()
    upgraded.channel_values[TASKS] = list(pending_sends)
    upgraded.channel_versions[TASKS] = tasks_version
    logger.debug(
        "Upgraded v%d checkpoint %s with %d pending send(s)",
        checkpoint.version,
        checkpoint.id,
        len(pending_sends),
    )
    return upgraded
