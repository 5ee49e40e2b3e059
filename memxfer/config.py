"""Configuration for the in-memory filesystem.

Provides the ``MemFSConfig`` dataclass and the ``configure`` factory that
builds and validates it.
"""

from dataclasses import dataclass

# Matches the Linux MAXSYMLINKS limit for a single path lookup.
DEFAULT_MAX_SYMLINK_HOPS = 40


@dataclass
class MemFSConfig:
    """Configuration for ``InMemoryFS``.

    Attributes:
        write_delay: Seconds slept per written byte before the content lock
            is taken. Simulates transfer throughput; 0 disables it.
        max_symlink_hops: Symlinks followed during one lookup before giving
            up with ``SymlinkLoopError``. None means no limit, so a symlink
            cycle makes the lookup loop forever.
    """

    write_delay: float = 1e-6
    max_symlink_hops: int | None = DEFAULT_MAX_SYMLINK_HOPS


def configure(**kwargs) -> MemFSConfig:
    """Configure the in-memory filesystem.

    Args:
        **kwargs: Fields of ``MemFSConfig``.
            - write_delay (float): Optional. Per-byte write delay in seconds.
            - max_symlink_hops (int | None): Optional. Symlink hop limit.

    Returns:
        MemFSConfig for ``InMemoryFS`` / ``in_memory_handlers``.

    Raises:
        ValueError: On unknown arguments or out-of-range values.

    Examples:
        >>> configure()
        MemFSConfig(write_delay=1e-06, max_symlink_hops=40)

        >>> configure(write_delay=0, max_symlink_hops=None)
        MemFSConfig(write_delay=0, max_symlink_hops=None)
    """
    write_delay = kwargs.pop("write_delay", 1e-6)
    max_symlink_hops = kwargs.pop("max_symlink_hops", DEFAULT_MAX_SYMLINK_HOPS)

    if kwargs:
        raise ValueError(
            f"Unexpected arguments for memory fs: {list(kwargs.keys())}"
        )

    if write_delay < 0:
        raise ValueError(f"write_delay must be >= 0, got {write_delay}")

    if max_symlink_hops is not None and max_symlink_hops < 1:
        raise ValueError(
            f"max_symlink_hops must be >= 1 or None, got {max_symlink_hops}"
        )

    return MemFSConfig(write_delay=write_delay, max_symlink_hops=max_symlink_hops)
