"""
Unit tests for the platform detection module.
"""

import pytest

from smtsetup.core.platform import (
    DEFAULT_PLATFORM,
    detect_platform,
    executable_name,
    normalize_platform,
)


class TestNormalizePlatform:
    """Tests for normalize_platform."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Linux", "linux"),
            ("Windows", "windows"),
            ("macOS", "macos"),
            ("MACOS", "macos"),
            (" linux ", "linux"),
        ],
    )
    def test_runner_values(self, raw, expected):
        """Test values reported by hosted runners."""
        assert normalize_platform(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "FreeBSD", "darwin"])
    def test_unrecognized_defaults_to_linux(self, raw):
        """Test absent or unknown values fall back to linux."""
        assert normalize_platform(raw) == "linux"
        assert DEFAULT_PLATFORM == "linux"


class TestDetectPlatform:
    """Tests for detect_platform."""

    def test_reads_runner_os(self, monkeypatch):
        """Test RUNNER_OS from the process environment is used."""
        monkeypatch.setenv("RUNNER_OS", "Windows")
        assert detect_platform() == "windows"

    def test_missing_runner_os(self):
        """Test a machine outside CI is treated as linux."""
        assert detect_platform() == "linux"

    def test_explicit_environment(self):
        """Test an explicit mapping overrides os.environ."""
        assert detect_platform({"RUNNER_OS": "macOS"}) == "macos"


class TestExecutableName:
    """Tests for executable_name."""

    def test_windows_suffix(self):
        """Test Windows executables get .exe."""
        assert executable_name("cvc4", "windows") == "cvc4.exe"

    @pytest.mark.parametrize("platform", ["linux", "macos"])
    def test_unix_names(self, platform):
        """Test unix executables keep their bare name."""
        assert executable_name("cvc4", platform) == "cvc4"
