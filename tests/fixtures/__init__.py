"""Entity modules scanned by the generation tests."""
