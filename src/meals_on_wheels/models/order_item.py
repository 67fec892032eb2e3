from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, event
from sqlalchemy.orm import relationship
from ..db.base import Base


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(128), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)  # фиксируется на момент заказа
    quantity = Column(Integer, nullable=False, default=1)
    line_total = Column(Numeric(10, 2), nullable=False)
    special_instructions = Column(String(500), nullable=True)

    order = relationship("Order", back_populates="items")


@event.listens_for(OrderItem, "before_update")
@event.listens_for(OrderItem, "before_delete")
def _order_items_are_frozen(mapper, connection, target):
    raise RuntimeError("Order items are immutable once the order is placed")
