"""core(설정/예외/로깅) 및 utils 단위 테스트"""
import logging
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from storefront.core.config import Settings
from storefront.core.exceptions import (
    CartException,
    FetchError,
    OutOfStockError,
    StockExceededError,
    StorefrontException,
)
from storefront.core.logging import HANDLER_NAME, LOGGER_NAME, setup_logging, truncate_for_log
from storefront.utils import from_epoch_ms, round_money, to_epoch_ms


class TestSettings:
    """Settings 검증"""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.catalog_cache_ttl == 86400
        assert settings.cart_max_quantity == 10
        assert settings.cart_max_age_days == 30
        assert settings.tax_rate == 0.08
        assert settings.shipping_threshold == 50.0
        assert settings.shipping_cost == 9.99
        assert settings.items_per_page == 12

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TAX_RATE", "0.1")
        monkeypatch.setenv("STORAGE_BACKEND", "memory")

        settings = Settings(_env_file=None)
        assert settings.tax_rate == 0.1
        assert settings.storage_backend == "memory"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("items_per_page", 0),
            ("cart_max_quantity", -1),
            ("catalog_fetch_timeout_s", 0),
            ("tax_rate", -0.01),
            ("cart_storage_key", "   "),
            ("storage_backend", "sqlite"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_strips_keys(self):
        assert Settings(_env_file=None, cart_storage_key="  cart  ").cart_storage_key == "cart"


class TestExceptions:
    """구조화된 예외"""

    def test_str_format(self):
        error = OutOfStockError("gamma-lamp")
        assert str(error) == "[OUT_OF_STOCK] Product is out of stock: gamma-lamp"
        assert error.details == {"product_id": "gamma-lamp"}

    def test_hierarchy(self):
        error = StockExceededError("a", 6, 5)
        assert isinstance(error, CartException)
        assert isinstance(error, StorefrontException)
        assert not isinstance(FetchError("feed", "timeout"), CartException)

    def test_default_error_code(self):
        assert StorefrontException("boom").error_code == "UNKNOWN_ERROR"


class TestUtils:
    """utils"""

    @pytest.mark.parametrize(
        "value, expected",
        [(2.675, 2.68), (3.9992, 4.0), (0.005, 0.01), (63.9792, 63.98), (10, 10.0)],
    )
    def test_round_money_half_up(self, value, expected):
        assert round_money(value) == expected

    def test_round_money_invalid(self):
        assert round_money("abc") == 0.0

    def test_epoch_ms(self):
        dt = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
        assert from_epoch_ms(to_epoch_ms(dt)) == dt
        assert to_epoch_ms(datetime(2026, 1, 15, 12, 0)) == to_epoch_ms(dt)

    def test_truncate_for_log(self):
        assert truncate_for_log("") == "[empty]"
        assert truncate_for_log("a" * 150, max_length=10) == "a" * 10 + "..."


class TestLogging:
    """로거 설정"""

    def test_single_handler(self):
        logger = setup_logging()
        before = len(logger.handlers)
        setup_logging()

        assert logger.name == LOGGER_NAME
        assert len(logger.handlers) == before
        assert [h.get_name() for h in logger.handlers].count(HANDLER_NAME) == 1

    def test_foreign_handler_is_left_alone(self):
        logger = logging.getLogger(LOGGER_NAME)
        foreign = logging.NullHandler()
        foreign.setLevel(logging.ERROR)
        logger.addHandler(foreign)
        try:
            setup_logging(level="INFO", environment="test")
            assert foreign.level == logging.ERROR
            assert foreign.formatter is None
        finally:
            logger.removeHandler(foreign)

    def test_production_disables_debug(self):
        logger = setup_logging(level="DEBUG", environment="production")
        try:
            assert logger.level == logging.INFO
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            setup_logging(level="INFO", environment="test")

    def test_development_allows_debug(self):
        logger = setup_logging(level="debug", environment="development")
        try:
            assert logger.level == logging.DEBUG
        finally:
            setup_logging(level="INFO", environment="test")
