"""
Versioning for sliceview. The version number is hard-coded; dev installs
from a git checkout get extra versioning info appended.
"""

import logging
import subprocess
from pathlib import Path


# The reference version number, bumped before each release.
__version__ = "0.1.0"


logger = logging.getLogger("sliceview")

# The repository root if this is a git checkout, None otherwise
repo_dir = Path(__file__).parents[1]
repo_dir = repo_dir if repo_dir.joinpath(".git").is_dir() else None


def get_version():
    """Get the version string."""
    if repo_dir:
        return get_extended_version()
    return __version__


def get_extended_version():
    """Get a version string that includes the commit distance and hash from git."""
    release, post, labels = get_version_info_from_git()

    base_release = ".".join(__version__.split(".")[:3])
    if not release:
        release = base_release
    elif release != base_release:
        logger.warning(
            f"sliceview version from git ({release}) and __version__ ({base_release}) don't match."
        )

    version = release
    if post and post != "0":
        version += f".post{post}"
    if labels:
        version += "+" + ".".join(labels)
    return version


def get_version_info_from_git():
    """Get (release, post, labels) from ``git describe``.

    Here ``release`` is the latest tag, ``post`` the number of commits
    since that tag, and ``labels`` a list with the short hash and
    possibly "dirty".
    """
    command = ["git", "describe", "--long", "--always", "--tags", "--dirty"]
    try:
        p = subprocess.run(command, cwd=repo_dir, capture_output=True)
    except OSError as err:
        logger.warning(f"Could not get sliceview version: {err}")
        return None, None, ["unknown"]

    output = p.stdout.decode(errors="ignore")
    if p.returncode:
        stderr = p.stderr.decode(errors="ignore")
        logger.warning(
            f"Could not get sliceview version.\n\nstdout: {output}\n\nstderr: {stderr}"
        )
        return None, None, ["unknown"]

    parts = output.strip().lstrip("v").split("-")
    if len(parts) <= 2:
        # No tags, only the hash and maybe 'dirty'
        parts = (None, None, *parts)
    release, post, *labels = parts
    return release, post, labels


version_info = tuple(
    int(part) if part.isnumeric() else part
    for part in __version__.split("+")[0].split(".")
)

__version__ = get_version()
