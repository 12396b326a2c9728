"""Known KCL runtime platform triples and release versions."""

from __future__ import annotations

from enum import Enum


class KclvmTriple(str, Enum):
    """Platform identifiers used to name runtime release archives."""

    UNKNOWN = ""
    LINUX_AMD64 = "linux-amd64"
    LINUX_ARM64 = "linux-arm64"
    DARWIN_AMD64 = "darwin-amd64"
    DARWIN_ARM64 = "darwin-arm64"
    WINDOWS = "windows"

    def __str__(self) -> str:
        return self.value


class KclvmVersion(str, Enum):
    """Released runtime versions, newest first.

    ``LATEST`` is an alias of the newest release.
    """

    V0_11_0 = "v0.11.0"
    LATEST = "v0.11.0"
    V0_11_0_ALPHA1 = "v0.11.0-alpha.1"
    V0_10_0 = "v0.10.0"
    V0_9_0 = "v0.9.0"
    V0_8_0 = "v0.8.0"
    V0_7_5 = "v0.7.5"
    V0_7_4 = "v0.7.4"
    V0_7_3 = "v0.7.3"
    V0_7_2 = "v0.7.2"
    V0_7_1 = "v0.7.1"
    V0_7_0 = "v0.7.0"
    V0_6_0 = "v0.6.0"
    V0_5_6 = "v0.5.6"
    V0_5_5 = "v0.5.5"
    V0_5_4 = "v0.5.4"
    V0_5_3 = "v0.5.3"
    V0_5_2 = "v0.5.2"
    V0_5_1 = "v0.5.1"
    V0_5_0 = "v0.5.0"
    V0_4_6 = "v0.4.6"
    V0_4_5 = "v0.4.5"
    V0_4_4 = "v0.4.4"
    V0_4_3 = "v0.4.3"

    def __str__(self) -> str:
        return self.value


KCLVM_ABI_VERSION = KclvmVersion.V0_11_0