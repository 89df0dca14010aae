import os
from decimal import Decimal

import pytest
from pydantic import ValidationError

from gavel.config import AuctionSettings
from gavel.rules.validator import IncrementRules


def test_defaults_match_increment_table() -> None:
    settings = AuctionSettings.from_env(environ={})
    assert settings.increment_rules() == IncrementRules(
        threshold=Decimal("5"), below=Decimal("0.2"), at_or_above=Decimal("0.5")
    )
    assert settings.max_bid_attempts == 3
    assert settings.default_max_squad_size == 25


def test_environment_overrides() -> None:
    settings = AuctionSettings.from_env(
        environ={
            "GAVEL_INCREMENT_THRESHOLD": "10",
            "GAVEL_LOW_INCREMENT": "0.25",
            "GAVEL_HIGH_INCREMENT": "1",
            "GAVEL_LOCK_TIMEOUT": "0.5",
            "GAVEL_MAX_BID_ATTEMPTS": "5",
            "GAVEL_PORT": "9001",
            "GAVEL_HOST": "",
            "UNRELATED": "x",
        }
    )
    rules = settings.increment_rules()
    assert rules.min_increment(Decimal("9.99")) == Decimal("0.25")
    assert rules.min_increment(Decimal("10")) == Decimal("1")
    assert settings.lock_timeout == 0.5
    assert settings.max_bid_attempts == 5
    assert settings.port == 9001
    assert settings.host == "localhost"


def test_env_file_is_loaded(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("GAVEL_MAX_BID_ATTEMPTS=7\n")
    monkeypatch.delenv("GAVEL_MAX_BID_ATTEMPTS", raising=False)

    try:
        settings = AuctionSettings.from_env(env_file=str(env_file))
    finally:
        # load_dotenv writes into os.environ directly
        os.environ.pop("GAVEL_MAX_BID_ATTEMPTS", None)

    assert settings.max_bid_attempts == 7


@pytest.mark.parametrize(
    "name, value",
    [
        ("GAVEL_LOW_INCREMENT", "0"),
        ("GAVEL_LOW_INCREMENT", "0.125"),
        ("GAVEL_INCREMENT_THRESHOLD", "1e30"),
        ("GAVEL_LOCK_TIMEOUT", "-1"),
        ("GAVEL_MAX_BID_ATTEMPTS", "0"),
        ("GAVEL_PORT", "not-a-port"),
    ],
)
def test_invalid_values_are_rejected(name: str, value: str) -> None:
    with pytest.raises(ValidationError):
        AuctionSettings.from_env(environ={name: value})
