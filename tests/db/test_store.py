from db.store import FileStore, MemoryStore


class TestFileStore:
    """Tests for FileStore."""

    def test_missing_key_is_none(self, test_config):
        """Test reading a key that was never written."""
        assert FileStore(test_config).get("nothing") is None

    def test_set_get_delete(self, test_config):
        """Test writing, reading back and deleting a key."""
        store = FileStore(test_config)

        store.set("ledger_budgets", "[]")
        assert store.get("ledger_budgets") == "[]"
        assert (test_config.data_dir / "ledger_budgets.json").exists()

        store.delete("ledger_budgets")
        assert store.get("ledger_budgets") is None

    def test_overwrite_leaves_no_temp_files(self, test_config):
        """Test that replacing a value leaves only the final file behind."""
        store = FileStore(test_config)
        store.set("k", "one")
        store.set("k", "two")

        assert store.get("k") == "two"
        assert [p.name for p in test_config.data_dir.iterdir()] == ["k.json"]

    def test_delete_missing_key(self, test_config):
        """Test that deleting an absent key is not an error."""
        FileStore(test_config).delete("absent")


class TestMemoryStore:
    """Tests for MemoryStore."""

    def test_initial_values_are_copied(self):
        """Test that the store does not share the initial dictionary."""
        initial = {"k": "v"}
        store = MemoryStore(initial)
        store.set("k", "w")
        assert initial == {"k": "v"}
        assert store.get("k") == "w"
