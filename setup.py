"""
Version discovery for the pavesim distribution; all other metadata lives in pyproject.toml.
"""
import re
import subprocess
from pathlib import Path
from setuptools import setup

FALLBACK_VERSION = "1.0.0"


def get_version() -> str:
    """get the last version tag from git, with fallback to __init__.py

    Returns:
        str: version tag in PEP 440 format
    """
    try:
        result = subprocess.run(
            ["git", "describe", "--tags"],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
            timeout=5
        )
        version_tag = result.stdout.decode("utf-8").strip()

        # "v1.2.0-14-g4f69b64" becomes "1.2.0.post14"
        match = re.match(r'v?(\d+\.\d+\.\d+)(?:-(\d+)-g[a-f0-9]+)?', version_tag)
        if match:
            base_version, commits_since = match.groups()
            return f"{base_version}.post{commits_since}" if commits_since else base_version
    except (subprocess.TimeoutExpired, FileNotFoundError):
        pass

    init_file = Path(__file__).parent / "src" / "pavesim" / "__init__.py"
    if init_file.exists():
        match = re.search(r'__version__\s*=\s*["\']([^"\']+)["\']', init_file.read_text())
        if match:
            return match.group(1)

    return FALLBACK_VERSION


def validate_version(version: str) -> bool:
    """Validate Version (matches PEP 440 format)

    Args:
        version (str): version string

    Returns:
        bool: if it validates, returns True, else False
    """
    pattern = r'^\d+\.\d+\.\d+([.-]?\w+)?$'
    return bool(re.match(pattern, version))


pavesim_version = get_version()
if not validate_version(pavesim_version):
    print(f"Warning: Version '{pavesim_version}' may not match semantic versioning pattern")

setup(version=pavesim_version)
