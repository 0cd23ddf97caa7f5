"""Tests for environment-driven settings"""

import pytest

from charity_ledger.core.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)
    monkeypatch.delenv("AWS_LAMBDA_FUNCTION_NAME", raising=False)


def test_memory_backend_outside_lambda():
    assert Settings(_env_file=None).STORAGE_BACKEND == "memory"


def test_dynamodb_backend_inside_lambda(monkeypatch):
    monkeypatch.setenv("AWS_LAMBDA_FUNCTION_NAME", "charity-ledger-api")

    assert Settings(_env_file=None).STORAGE_BACKEND == "dynamodb"


def test_explicit_backend_wins(monkeypatch):
    monkeypatch.setenv("AWS_LAMBDA_FUNCTION_NAME", "charity-ledger-api")
    monkeypatch.setenv("STORAGE_BACKEND", "memory")

    assert Settings(_env_file=None).STORAGE_BACKEND == "memory"


def test_unknown_backend_is_rejected(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "postgres")

    with pytest.raises(ValueError):
        Settings(_env_file=None)
