import enum
from sqlalchemy import (
    Column, Integer, String, Numeric, DateTime, ForeignKey, JSON, Text, Enum as SAEnum, func, event,
)
from sqlalchemy.orm import relationship
from ..db.base import Base


class OrderStatusEnum(str, enum.Enum):
    placed = "placed"
    confirmed = "confirmed"
    preparing = "preparing"
    out_for_delivery = "out_for_delivery"
    delivered = "delivered"
    rejected = "rejected"
    cancelled = "cancelled"


class PaymentMethodEnum(str, enum.Enum):
    cod = "cod"
    online = "online"
    card = "card"


class PaymentStatusEnum(str, enum.Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(32), nullable=False, unique=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    delivery_address = Column(JSON, nullable=False)  # снимок адреса на момент заказа

    # цены зафиксированы при создании и больше не пересчитываются
    subtotal = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False)

    status = Column(SAEnum(OrderStatusEnum, name="order_status"), nullable=False, default=OrderStatusEnum.placed)
    payment_method = Column(
        SAEnum(PaymentMethodEnum, name="payment_method"), nullable=False, default=PaymentMethodEnum.cod
    )
    payment_status = Column(
        SAEnum(PaymentStatusEnum, name="payment_status"), nullable=False, default=PaymentStatusEnum.pending
    )
    estimated_delivery_time = Column(DateTime(timezone=True), nullable=True)
    actual_delivery_time = Column(DateTime(timezone=True), nullable=True)
    special_instructions = Column(String(500), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    version = Column(Integer, nullable=False)

    # связи
    items = relationship(
        "OrderItem", back_populates="order", order_by="OrderItem.id", lazy="selectin",
    )
    tracking_history = relationship(
        "TrackingEvent", back_populates="order", order_by="TrackingEvent.id", lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}


class TrackingEvent(Base):
    __tablename__ = "order_tracking_events"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    status = Column(SAEnum(OrderStatusEnum, name="order_status"), nullable=False)
    message = Column(String(500), nullable=False)
    updated_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    order = relationship("Order", back_populates="tracking_history")


class OrderCounter(Base):
    """Счётчик заказов за календарный день, источник номера заказа."""

    __tablename__ = "order_counters"

    day = Column(String(6), primary_key=True)  # YYMMDD
    last_value = Column(Integer, nullable=False, default=0)


@event.listens_for(TrackingEvent, "before_update")
@event.listens_for(TrackingEvent, "before_delete")
def _tracking_history_is_append_only(mapper, connection, target):
    raise RuntimeError("Tracking events are append-only")
