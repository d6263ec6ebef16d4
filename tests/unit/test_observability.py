"""Unit tests for tracing decorators and logging configuration."""

import json
import logging
from unittest.mock import MagicMock, Mock, patch

import pytest

from restaurant_order_service.models.order_models import OrderStatus
from restaurant_order_service.observability import configure_logging, traced


def _span_of(mock_get_tracer: Mock) -> MagicMock:
    tracer = mock_get_tracer.return_value
    return tracer.start_as_current_span.return_value.__enter__.return_value


@pytest.mark.unit
class TestTracedDecorator:
    """Tests for the traced decorator."""

    @pytest.mark.asyncio
    @patch("restaurant_order_service.observability.decorators.trace.get_tracer")
    async def test_async_function_span(self, mock_get_tracer: Mock) -> None:
        """Test that async calls run in a named span with ID attributes."""

        @traced("update_order_status")
        async def update_status(order_id: int, status: OrderStatus) -> str:
            return "done"

        result = await update_status(order_id=42, status=OrderStatus.PREPARING)

        assert result == "done"
        mock_get_tracer.return_value.start_as_current_span.assert_called_once_with(
            "update_order_status", record_exception=False, set_status_on_exception=False
        )
        span = _span_of(mock_get_tracer)
        span.set_attribute.assert_any_call("order_service.order_id", "42")
        span.set_attribute.assert_any_call("order_service.status", "preparing")
        span.set_attribute.assert_any_call("success", True)

    @pytest.mark.asyncio
    @patch("restaurant_order_service.observability.decorators.trace.get_tracer")
    async def test_positional_method_arguments_become_attributes(
        self, mock_get_tracer: Mock
    ) -> None:
        """Test that IDs passed positionally to a service method are recorded."""

        class Service:
            @traced("update_order_status")
            async def update_status(self, order_id: int, status: OrderStatus) -> str:
                return "done"

        await Service().update_status(7, OrderStatus.DELIVERED)

        span = _span_of(mock_get_tracer)
        span.set_attribute.assert_any_call("order_service.order_id", "7")
        span.set_attribute.assert_any_call("order_service.status", "delivered")

    @patch("restaurant_order_service.observability.decorators.trace.get_tracer")
    def test_sync_function_defaults_span_name(self, mock_get_tracer: Mock) -> None:
        """Test that plain functions are traced under their own name."""

        @traced()
        def build_quote(restaurant_id: int) -> int:
            return restaurant_id * 2

        assert build_quote(restaurant_id=3) == 6
        mock_get_tracer.return_value.start_as_current_span.assert_called_once_with(
            "build_quote", record_exception=False, set_status_on_exception=False
        )

    @pytest.mark.asyncio
    @patch("restaurant_order_service.observability.decorators.trace.get_tracer")
    async def test_exception_recorded_and_reraised(self, mock_get_tracer: Mock) -> None:
        """Test that failures mark the span and propagate."""

        @traced("create_order")
        async def create_order() -> None:
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            await create_order()

        span = _span_of(mock_get_tracer)
        span.set_attribute.assert_any_call("success", False)
        span.set_attribute.assert_any_call("error.type", "ValueError")
        span.record_exception.assert_called_once()
        span.set_status.assert_called_once()


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_emits_json_records(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that the root logger writes JSON lines at the requested level."""
        root_logger = logging.getLogger()
        saved_handlers, saved_level = root_logger.handlers[:], root_logger.level
        try:
            with patch.dict("os.environ", {"LOG_LEVEL": "WARNING"}):
                configure_logging("INFO")

            assert root_logger.level == logging.WARNING
            logging.getLogger("restaurant_order_service.test").warning("order rejected")

            lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
            record = json.loads(lines[-1])
            assert record["message"] == "order rejected"
            assert record["levelname"] == "WARNING"
            assert record["name"] == "restaurant_order_service.test"
        finally:
            root_logger.handlers[:] = saved_handlers
            root_logger.setLevel(saved_level)
