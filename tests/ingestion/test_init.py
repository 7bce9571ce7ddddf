import pytest

from ingestion import get_available_modules, get_ingestion_module, get_module_for_path
import ingestion.csv_format as csv_format
import ingestion.json_format as json_format


class TestGetIngestionModule:
    """Tests for get_ingestion_module function."""

    def test_get_csv_module(self):
        """Test retrieving the csv module."""
        assert get_ingestion_module("csv") == csv_format

    def test_get_json_module(self):
        """Test retrieving the json module."""
        assert get_ingestion_module("json") == json_format

    def test_get_invalid_module_raises_error(self):
        """Test that requesting an unknown module raises ValueError."""
        with pytest.raises(ValueError, match="Unknown ingestion module: invalid"):
            get_ingestion_module("invalid")

    def test_get_case_sensitive(self):
        """Test that module names are case-sensitive."""
        with pytest.raises(ValueError, match="Unknown ingestion module: CSV"):
            get_ingestion_module("CSV")


class TestGetModuleForPath:
    """Tests for get_module_for_path function."""

    def test_csv_extension(self):
        """Test that .csv files use the csv module."""
        assert get_module_for_path("export.CSV") == csv_format

    def test_everything_else_is_json(self):
        """Test that other extensions fall back to JSON."""
        assert get_module_for_path("export.json") == json_format
        assert get_module_for_path("export") == json_format


class TestGetAvailableModules:
    """Tests for get_available_modules function."""

    def test_returns_all_modules(self):
        """Test that all expected modules are returned."""
        assert set(get_available_modules()) == {"csv", "json"}

    def test_returns_strings(self):
        """Test that all returned values are strings."""
        assert all(isinstance(m, str) for m in get_available_modules())
