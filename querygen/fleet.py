"""Host sampling over a simulated fleet."""

import random

from querygen.errors import InvalidSampleSize

HOST_NAME_FORMAT = "host_{}"


def host_name(index: int) -> str:
    """Return the host name for a fleet index."""
    return HOST_NAME_FORMAT.format(index)


def sample_hosts(fleet_size: int, count: int, rng: random.Random) -> list[int]:
    """Draw distinct host indices without replacement.

    Every ``count``-subset of ``[0, fleet_size)`` is equally likely. Uses a
    partial shuffle, so cost is proportional to ``count``, not the fleet size.

    Args:
        fleet_size: Number of hosts in the fleet.
        count: Number of hosts to draw.
        rng: Random source.

    Returns:
        Indices in draw order.

    Raises:
        InvalidSampleSize: If ``count`` is outside ``[1, fleet_size]``.
    """
    if not 1 <= count <= fleet_size:
        raise InvalidSampleSize(
            f"Cannot sample {count} hosts from a fleet of {fleet_size}"
        )
    return rng.sample(range(fleet_size), count)


def sample_host_names(fleet_size: int, count: int, rng: random.Random) -> list[str]:
    """Draw distinct host names without replacement."""
    return [host_name(i) for i in sample_hosts(fleet_size, count, rng)]


def random_host(fleet_size: int, rng: random.Random) -> str:
    """Draw a single host name uniformly from the fleet."""
    if fleet_size < 1:
        raise InvalidSampleSize(f"Cannot sample a host from a fleet of {fleet_size}")
    return host_name(rng.randrange(fleet_size))
