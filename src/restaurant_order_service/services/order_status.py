"""Order status progression rules and the customer-facing tracking steps."""

from restaurant_order_service.errors import InvalidStatusTransition, ValidationError
from restaurant_order_service.models.order_models import OrderStatus, TrackingStep

STATUS_LABELS: dict[OrderStatus, str] = {
    OrderStatus.CONFIRMED: "Order Confirmed",
    OrderStatus.PREPARING: "Preparing",
    OrderStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    OrderStatus.DELIVERED: "Delivered",
}

FINAL_STATUS = OrderStatus.DELIVERED


def parse_status(value: str | OrderStatus) -> OrderStatus:
    """Convert a raw status value to OrderStatus.

    Args:
        value: Status string or enum member

    Returns:
        The matching OrderStatus

    Raises:
        ValidationError: If the value is not a known status
    """
    try:
        return OrderStatus(value)
    except ValueError as e:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(
            f"Invalid status '{value}'", details={"allowed": allowed}
        ) from e


def check_transition(current: OrderStatus, target: OrderStatus) -> None:
    """Validate that an order may move from ``current`` to ``target``.

    Statuses only move forward; repeating the current status or skipping
    ahead is allowed.

    Args:
        current: Current order status
        target: Requested status

    Raises:
        InvalidStatusTransition: If the target is earlier than the current status
    """
    if target.rank < current.rank:
        raise InvalidStatusTransition(
            f"Cannot move order from '{current.value}' back to '{target.value}'"
        )


def tracking_steps(status: OrderStatus) -> list[TrackingStep]:
    """Build the static tracker view for an order status.

    Steps before the current one are completed; the current step is active
    and also completed once the order is delivered.

    Args:
        status: Current order status

    Returns:
        One step per status in progression order
    """
    return [
        TrackingStep(
            id=step,
            label=STATUS_LABELS[step],
            completed=step.rank < status.rank or status == FINAL_STATUS,
            active=step == status,
        )
        for step in OrderStatus
    ]
