"""Feature modules, one router per feature."""
