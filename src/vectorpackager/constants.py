"""Shared constants for vectorpackager."""

DEFAULT_PG_MAJOR = "15"
DEFAULT_PG_MINOR = "4"
MAKE_JOBS = 6
PGRX_VERSION = "0.9.8"

EXTENSION_NAME = "timescaledb-vector"
EXTENSION_REPOSITORY = "timescale/timescaledb-vector"
GITHUB_URL = "https://github.com"

PG_SRC_DIR = "pgbuild"
PG_INSTALL_DIR = "postgresql"
TAG_DIR = "timescaledb_vector"
PKGDUMP_DIR = "pkgdump"
ARTIFACTS_DIR = "artifacts"
OUTPUT_DIR = "output"
PACKAGE_SCRIPT = "scripts/package-deb.sh"

POSTGRES_MIRROR = "https://ftp.postgresql.org/pub/source"

ARTIFACT_RETENTION_DAYS = 90
ARTIFACT_METADATA_FILE = "artifact.json"

BASE_PACKAGES = (
    "build-essential",
    "pkg-config",
    "flex",
    "bison",
    "libreadline-dev",
    "zlib1g-dev",
    "libssl-dev",
    "libclang-dev",
    "clang",
    "git",
    "curl",
)
DEB_PACKAGES = ("dpkg-dev", "debhelper")

# Tools the apt install step cannot provide itself.
REQUIRED_TOOLS = ("apt-get", "bash", "cargo")
INSTALL_HINTS = {
    "git": "apt-get install git",
    "make": "apt-get install build-essential",
    "bash": "apt-get install bash",
    "cargo": "install Rust from https://rustup.rs",
    "apt-get": "run on a Debian or Ubuntu host",
    "sudo": "run as root or apt-get install sudo",
}
