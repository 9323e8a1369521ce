"""
Tests for configuration loading and resolver wiring.
"""

import tempfile
from pathlib import Path

import pytest
import yaml

from src.featurestore.config import (
    ConfigManager,
    ResolverConfig,
    StorageFactory,
    StoreConfig,
    build_resolver,
)
from src.featurestore.core import ConfigurationError, FeatureResolver
from src.featurestore.storage import InMemoryStorage, ParquetStorage

from tests.fixtures.feature_graphs import SIMPLE_GRAPH, build_features

FIXTURE_FILE = Path(__file__).parent.parent / "fixtures" / "dockerfile_features.yaml"


@pytest.fixture
def temp_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# Tests: Parsing
# ============================================================================

class TestConfigParsing:
    """Tests for building config objects from dictionaries."""

    def test_defaults(self):
        """Test an empty configuration."""
        config = ConfigManager.create_resolver_config({})

        assert config.store.backend == "memory"
        assert config.max_workers == 1
        assert config.logging.level == "INFO"

    def test_full_config(self):
        """Test every section is read."""
        config = ConfigManager.create_resolver_config({
            "store": {"backend": "Parquet", "path": "/data/features"},
            "resolver": {"max_workers": 4},
            "logging": {"level": "debug", "file": "/tmp/fs.log", "debug": "yes"},
        })

        assert config.store.backend == "parquet"
        assert config.store.path == Path("/data/features")
        assert config.max_workers == 4
        assert config.logging.level == "DEBUG"
        assert config.logging.file == "/tmp/fs.log"
        assert config.logging.debug is True

    def test_env_substitution(self, monkeypatch):
        """Test ${VAR} and ${VAR:default} substitution."""
        monkeypatch.setenv("FEATURE_STORE_PATH", "/srv/features")
        monkeypatch.delenv("FEATURE_FIXTURES", raising=False)

        parquet = ConfigManager.create_store_config(
            {"backend": "parquet", "path": "${FEATURE_STORE_PATH}"}
        )
        memory = ConfigManager.create_store_config(
            {"backend": "memory", "fixtures": "${FEATURE_FIXTURES:/etc/features.yaml}"}
        )

        assert parquet.path == Path("/srv/features")
        assert memory.fixtures == Path("/etc/features.yaml")

    def test_unknown_backend(self):
        """Test unsupported backends are rejected."""
        with pytest.raises(ConfigurationError):
            ConfigManager.create_store_config({"backend": "redis"})

    def test_parquet_requires_path(self):
        """Test the parquet backend needs a directory."""
        with pytest.raises(ConfigurationError):
            ConfigManager.create_store_config({"backend": "parquet"})

    @pytest.mark.parametrize("workers", [0, "many"])
    def test_invalid_max_workers(self, workers):
        """Test worker count validation."""
        with pytest.raises(ConfigurationError):
            ConfigManager.create_resolver_config({"resolver": {"max_workers": workers}})

    def test_to_dict_roundtrip(self):
        """Test a config survives to_dict and re-parsing."""
        config = ResolverConfig(
            store=StoreConfig(backend="parquet", path=Path("/data")),
            max_workers=3,
        )

        assert ConfigManager.create_resolver_config(config.to_dict()) == config


# ============================================================================
# Tests: YAML Files
# ============================================================================

class TestYamlFiles:
    """Tests for loading and saving YAML configuration."""

    def test_save_and_load(self, temp_dir):
        """Test a saved config loads back."""
        path = temp_dir / "conf" / "featurestore.yaml"
        config = ResolverConfig(store=StoreConfig(backend="memory", fixtures=FIXTURE_FILE))

        ConfigManager.save_yaml(config.to_dict(), path)

        assert ConfigManager.load(path) == config

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigurationError):
            ConfigManager.load_yaml(temp_dir / "missing.yaml")

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "bad.yaml"
        path.write_text("store: [unclosed")

        with pytest.raises(ConfigurationError):
            ConfigManager.load_yaml(path)

    def test_non_mapping(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text(yaml.safe_dump([1, 2, 3]))

        with pytest.raises(ConfigurationError):
            ConfigManager.load_yaml(path)


# ============================================================================
# Tests: Wiring
# ============================================================================

class TestWiring:
    """Tests for building storage and resolvers from config."""

    def test_factory_memory(self):
        storage = StorageFactory.create(StoreConfig(backend="memory"))

        assert isinstance(storage, InMemoryStorage)
        assert len(storage) == 0

    def test_factory_memory_with_fixtures(self):
        storage = StorageFactory.create(StoreConfig(backend="memory", fixtures=FIXTURE_FILE))

        assert "python-app" in storage

    def test_factory_parquet(self, temp_dir):
        ParquetStorage.write(build_features(SIMPLE_GRAPH), temp_dir)

        storage = StorageFactory.create(StoreConfig(backend="parquet", path=temp_dir))

        assert isinstance(storage, ParquetStorage)

    def test_factory_unknown_backend(self):
        with pytest.raises(ConfigurationError):
            StorageFactory.create(StoreConfig(backend="redis"))

    def test_build_resolver(self, temp_dir):
        """Test a resolver built from a YAML file resolves features."""
        ParquetStorage.write(build_features(SIMPLE_GRAPH), temp_dir / "store")
        path = temp_dir / "featurestore.yaml"
        ConfigManager.save_yaml({
            "store": {"backend": "parquet", "path": str(temp_dir / "store")},
            "resolver": {"max_workers": 2},
        }, path)

        resolver = build_resolver(ConfigManager.load(path), configure_logging=False)

        assert isinstance(resolver, FeatureResolver)
        assert resolver.max_workers == 2
        assert [f.name for f in resolver.resolve("C")] == ["A", "B", "C"]
