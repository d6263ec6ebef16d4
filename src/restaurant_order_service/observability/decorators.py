"""OpenTelemetry tracing decorators."""

import functools
import inspect
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

F = TypeVar("F", bound=Callable[..., Any])

# Arguments copied onto spans when the traced call receives them
SPAN_ATTRIBUTE_ARGS = ("order_id", "restaurant_id", "menu_item_id", "status")


@contextmanager
def _operation_span(
    tracer: trace.Tracer, name: str, func_name: str, arguments: dict[str, Any]
) -> Iterator[Span]:
    with tracer.start_as_current_span(
        name, record_exception=False, set_status_on_exception=False
    ) as span:
        span.set_attribute("function.name", func_name)
        for key in SPAN_ATTRIBUTE_ARGS:
            value = arguments.get(key)
            if isinstance(value, Enum):
                value = value.value
            if isinstance(value, str | int):
                span.set_attribute(f"order_service.{key}", str(value))

        try:
            yield span
        except Exception as e:
            span.set_attribute("success", False)
            span.set_attribute("error.type", type(e).__name__)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
        span.set_attribute("success", True)


def traced(span_name: str | None = None, service_name: str = "order-svc") -> Callable[[F], F]:
    """Decorator to wrap a service operation in an OpenTelemetry span.

    Both plain and async functions are supported. Identifying arguments
    (order, restaurant and menu item IDs, target status) become span
    attributes whether passed positionally or by keyword, and raised
    exceptions are recorded before propagating.

    Args:
        span_name: Name for the span (defaults to the function name)
        service_name: Instrumentation scope name for the tracer

    Returns:
        Decorated function with tracing

    Example:
        @traced("create_order")
        async def create_order(self, request: CreateOrderRequest) -> OrderWithItems:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__
        tracer = trace.get_tracer(service_name)
        signature = inspect.signature(func)

        def bind(args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
            try:
                return signature.bind_partial(*args, **kwargs).arguments
            except TypeError:
                return kwargs

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with _operation_span(tracer, name, func.__name__, bind(args, kwargs)):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with _operation_span(tracer, name, func.__name__, bind(args, kwargs)):
                return func(*args, **kwargs)

        return sync_wrapper  # type: ignore

    return decorator
