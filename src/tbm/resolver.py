"""Resolution of requested target names into a single connection profile."""

from collections.abc import Sequence
from dataclasses import dataclass

from .interfaces import ConfigProtocol
from .logging import get_logger
from .models import ConnectionProfile, Target

logger = get_logger(__name__)


@dataclass(frozen=True)
class Resolved:
    """Every requested target matched and they share host and username"""

    profile: ConnectionProfile


@dataclass(frozen=True)
class UnknownTargets:
    """Requested names with no configured target"""

    names: tuple[str, ...]


@dataclass(frozen=True)
class IncompatibleTargets:
    """Matched targets that cannot share one tunnel session"""

    targets: tuple[Target, ...]

    def mismatched_fields(self) -> list[str]:
        """Names of the fields that differ from the first target."""
        first = self.targets[0]
        fields = []
        if any(target.host != first.host for target in self.targets[1:]):
            fields.append("host")
        if any(target.username != first.username for target in self.targets[1:]):
            fields.append("username")
        return fields


@dataclass(frozen=True)
class NoTargetsRequested:
    """No names were requested; carries every configured name"""

    names: tuple[str, ...]


ResolutionResult = Resolved | UnknownTargets | IncompatibleTargets | NoTargetsRequested


def resolve(requested_names: Sequence[str], config: ConfigProtocol) -> ResolutionResult:
    """Resolve requested target names against the configuration.

    Names are matched literally and in the order given; duplicates are kept.
    Unknown names are reported before any compatibility check is made.

    Args:
        requested_names: Target names from the command line
        config: Configuration to look targets up in

    Returns:
        One of Resolved, UnknownTargets, IncompatibleTargets or
        NoTargetsRequested
    """
    if not requested_names:
        return NoTargetsRequested(tuple(config.each_target()))

    targets: list[Target] = []
    unmatched: list[str] = []
    for name in requested_names:
        target = config.get_target(name)
        if target is None:
            unmatched.append(name)
        else:
            targets.append(target)

    if unmatched:
        logger.info("Unknown targets requested", names=unmatched)
        return UnknownTargets(tuple(unmatched))

    first = targets[0]
    for target in targets[1:]:
        if target.host != first.host or target.username != first.username:
            logger.info(
                "Targets cannot be combined",
                names=[t.name for t in targets],
            )
            return IncompatibleTargets(tuple(targets))

    profile = ConnectionProfile.from_targets(targets)
    logger.info(
        "Resolved targets",
        names=list(requested_names),
        host=profile.host,
        username=profile.username,
    )
    return Resolved(profile)
