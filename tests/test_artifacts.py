"""
Unit tests for release artifact resolution.
"""

import pytest

from smtsetup.artifacts import (
    ArtifactDescriptor,
    Z3_LINUX_GLIBC,
    Z3_MACOS_SUFFIX,
    descriptors_for,
    known_tools,
    resolve,
    z3_linux_glibc,
    z3_macos_suffix,
)
from smtsetup.core.exceptions import UnknownToolError
from smtsetup.core.platform import SUPPORTED_PLATFORMS

Z3_RELEASES = "https://github.com/Z3Prover/z3/releases/download"
CVC5_RELEASES = "https://github.com/cvc5/cvc5/releases/download"


class TestZ3Suffixes:
    """Tests for the Z3 build-host suffix tables."""

    @pytest.mark.parametrize(
        "version,expected",
        [
            ("4.13.0", "2.35"),
            ("4.13.4", "2.35"),
            ("4.14.0", "2.35"),
            ("4.14.1", "2.35"),
            ("4.15.0", "2.39"),
            ("4.15.4", "2.39"),
        ],
    )
    def test_linux_glibc(self, version, expected):
        """Test known versions map to their glibc build host."""
        assert z3_linux_glibc(version) == expected

    @pytest.mark.parametrize(
        "version,expected",
        [
            ("4.13.0", "11.7.10"),
            ("4.13.2", "12.7.6"),
            ("4.13.3", "13.7"),
            ("4.13.4", "13.7.1"),
            ("4.14.0", "13.7.2"),
            ("4.14.1", "13.7.4"),
            ("4.15.0", "13.7.5"),
            ("4.15.1", "13.7.6"),
            ("4.15.3", "13.7.6"),
            ("4.15.4", "13.7.6"),
        ],
    )
    def test_macos_suffix(self, version, expected):
        """Test known versions map to their macOS build host."""
        assert z3_macos_suffix(version) == expected

    def test_future_version_uses_newest_build_host(self):
        """Test unknown versions fall back to the newest known suffixes."""
        assert z3_linux_glibc("5.0.0") == "2.39"
        assert z3_macos_suffix("5.0.0") == "13.7.6"

    def test_lookup_is_exact_match(self):
        """Test prefixes of known versions are not matched."""
        assert z3_macos_suffix("4.13") == "13.7.6"
        assert z3_linux_glibc("4.14") == "2.39"

    def test_tables_only_hold_release_versions(self):
        """Test table keys look like x.y.z release versions."""
        for version in list(Z3_LINUX_GLIBC) + list(Z3_MACOS_SUFFIX):
            assert len(version.split(".")) == 3


class TestResolveZ3:
    """Tests for Z3 artifact descriptors."""

    def test_linux(self):
        """Test Linux asset embeds the glibc suffix."""
        descriptor = resolve("z3", "4.14.0", "linux")

        assert descriptor == ArtifactDescriptor(
            url=f"{Z3_RELEASES}/z3-4.14.0/z3-4.14.0-x64-glibc-2.35.zip",
            format="zip",
            bin_subpath="z3-4.14.0-x64-glibc-2.35/bin/",
        )

    def test_windows(self):
        """Test Windows asset has no build-host suffix."""
        descriptor = resolve("z3", "4.14.0", "windows")

        assert descriptor.url == f"{Z3_RELEASES}/z3-4.14.0/z3-4.14.0-x64-win.zip"
        assert descriptor.format == "zip"
        assert descriptor.bin_subpath == "z3-4.14.0-x64-win/bin/"

    def test_macos(self):
        """Test macOS asset embeds the macOS suffix."""
        descriptor = resolve("z3", "4.14.0", "macos")

        assert descriptor.url == (
            f"{Z3_RELEASES}/z3-4.14.0/z3-4.14.0-x64-osx-13.7.2.zip"
        )
        assert descriptor.url.endswith("-x64-osx-13.7.2.zip")
        assert descriptor.bin_subpath == "z3-4.14.0-x64-osx/bin/"

    def test_future_version(self):
        """Test an unreleased version resolves with the default suffixes."""
        assert resolve("z3", "5.0.0", "linux").url == (
            f"{Z3_RELEASES}/z3-5.0.0/z3-5.0.0-x64-glibc-2.39.zip"
        )
        assert resolve("z3", "5.0.0", "macos").url == (
            f"{Z3_RELEASES}/z3-5.0.0/z3-5.0.0-x64-osx-13.7.6.zip"
        )


class TestResolveCvc5:
    """Tests for cvc5 artifact descriptors."""

    @pytest.mark.parametrize(
        "platform,name",
        [
            ("linux", "cvc5-Linux-x86_64-static"),
            ("windows", "cvc5-Win64-x86_64-static"),
            ("macos", "cvc5-macOS-x86_64-static"),
        ],
    )
    def test_all_platforms(self, platform, name):
        """Test every platform gets a static zip build."""
        descriptor = resolve("cvc5", "1.2.1", platform)

        assert descriptor.url == f"{CVC5_RELEASES}/cvc5-1.2.1/{name}.zip"
        assert descriptor.format == "zip"
        assert descriptor.bin_subpath == f"{name}/bin/"


class TestResolveOptionalTools:
    """Tests for CVC4 and Princess descriptors."""

    def test_cvc4_linux_is_bare_executable(self):
        """Test CVC4 on Linux downloads the executable itself."""
        descriptor = resolve("cvc4", "1.8", "linux")

        assert descriptor.url == (
            "https://github.com/CVC4/CVC4/releases/download/1.8/"
            "cvc4-1.8-x86_64-linux-opt"
        )
        assert descriptor.format == "file"
        assert descriptor.bin_subpath == ""

    def test_cvc4_windows(self):
        """Test CVC4 on Windows downloads an .exe."""
        descriptor = resolve("cvc4", "1.8", "windows")

        assert descriptor.url.endswith("/1.8/cvc4-1.8-win64-opt.exe")
        assert descriptor.format == "file"

    def test_cvc4_has_no_macos_build(self):
        """Test CVC4 resolves to nothing on macOS."""
        assert resolve("cvc4", "1.8", "macos") is None
        assert descriptors_for("cvc4", "1.8")["macos"] is None

    def test_princess_same_on_every_platform(self):
        """Test Princess uses one cross-platform archive."""
        table = descriptors_for("princess", "2024-11-08")
        expected = ArtifactDescriptor(
            url=(
                "https://github.com/uuverifiers/princess/releases/download/"
                "snapshot-2024-11-08/princess-bin-2024-11-08.zip"
            ),
            format="zip",
            bin_subpath="princess-bin-2024-11-08/bin/",
        )

        assert all(table[platform] == expected for platform in SUPPORTED_PLATFORMS)


class TestDescriptorTables:
    """Tests for descriptors_for."""

    def test_table_covers_every_platform(self):
        """Test every known tool has an entry for every platform."""
        for tool in known_tools():
            table = descriptors_for(tool, "1.0.0")
            assert set(table) == set(SUPPORTED_PLATFORMS)

    def test_resolution_is_pure(self):
        """Test resolving twice yields equal descriptors."""
        assert descriptors_for("z3", "4.13.3") == descriptors_for("z3", "4.13.3")

    def test_descriptor_is_immutable(self):
        """Test descriptors cannot be modified after resolution."""
        descriptor = resolve("z3", "4.14.0", "linux")

        with pytest.raises(AttributeError):
            descriptor.url = "https://example.com"

    def test_unknown_tool(self):
        """Test unknown tools raise UnknownToolError."""
        with pytest.raises(UnknownToolError, match="yices"):
            descriptors_for("yices", "2.6.4")
