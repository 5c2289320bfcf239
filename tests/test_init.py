"""Tests for package initialization."""

import importlib.metadata
from unittest.mock import patch

import pysuperpose


class TestVersionImport:
    """Tests for version import."""

    def test_version_available(self) -> None:
        """Test version is available when package is installed."""
        assert hasattr(pysuperpose, "__version__")
        assert isinstance(pysuperpose.__version__, str)

    def test_version_fallback_on_package_not_found(self) -> None:
        """Test version falls back to 0.0.0 when package not found."""
        import importlib as imp

        with patch.object(importlib.metadata, "version", side_effect=importlib.metadata.PackageNotFoundError):
            # Need to reload module to trigger the except block
            import pysuperpose as pkg

            imp.reload(pkg)
            assert pkg.__version__ == "0.0.0"


class TestPublicApi:
    """Tests for names exported at package level."""

    def test_exports(self) -> None:
        """Test the main entry points are importable from the package."""
        for name in ("Superpose", "Superposition", "SuperpositionAlgo", "NumericalFailureError", "SizeMismatchError"):
            assert hasattr(pysuperpose, name)

    def test_superimpose_alias(self) -> None:
        """Test Superimpose is the same class as Superpose."""
        assert pysuperpose.Superimpose is pysuperpose.Superpose
