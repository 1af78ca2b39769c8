"""Importable suites used by resolver, rerunner and CLI tests."""
