"""Custom metrics for the restaurant order service."""

from decimal import Decimal

from opentelemetry import metrics

meter = metrics.get_meter("order-svc")

orders_created_counter = meter.create_counter(
    name="orders_created_total",
    description="Total number of orders persisted",
    unit="1",
)

order_failure_counter = meter.create_counter(
    name="order_creation_failure_total",
    description="Total number of rejected or failed order submissions by error type",
    unit="1",
)

order_total_histogram = meter.create_histogram(
    name="order_total_amount",
    description="Order totals at creation time",
    unit="1",
)

status_transition_counter = meter.create_counter(
    name="order_status_transition_total",
    description="Order status updates by target status",
    unit="1",
)

image_upload_counter = meter.create_counter(
    name="image_upload_total",
    description="Menu image uploads by outcome",
    unit="1",
)


def record_order_created(restaurant_id: int, total: Decimal, item_count: int) -> None:
    """Record a successfully persisted order.

    Args:
        restaurant_id: Restaurant the order was placed with
        total: Order total
        item_count: Number of order lines
    """
    attributes = {"restaurant_id": str(restaurant_id)}
    orders_created_counter.add(1, attributes)
    # Histograms take floats; the stored total stays Decimal
    order_total_histogram.record(float(total), {**attributes, "line_count": item_count})


def record_order_failure(error_type: str) -> None:
    """Record a failed order submission.

    Args:
        error_type: Exception class name
    """
    order_failure_counter.add(1, {"error_type": error_type})


def record_status_transition(status: str) -> None:
    """Record an order status update.

    Args:
        status: The status the order moved to
    """
    status_transition_counter.add(1, {"status": status})


def record_image_upload(success: bool) -> None:
    """Record an image upload attempt.

    Args:
        success: Whether the image was stored
    """
    image_upload_counter.add(1, {"success": success})
