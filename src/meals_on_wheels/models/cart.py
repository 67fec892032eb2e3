from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from ..db.base import Base


class Cart(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)  # одна корзина на клиента
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)  # копия на момент создания корзины
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    version = Column(Integer, nullable=False)

    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (UniqueConstraint("cart_id", "menu_item_id", name="uq_cart_items_cart_menu_item"),)

    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(Integer, nullable=False)  # ссылка без FK: позиция может быть удалена из меню
    name = Column(String(128), nullable=False)  # фиксируется при добавлении
    unit_price = Column(Numeric(10, 2), nullable=False)  # фиксируется при добавлении
    quantity = Column(Integer, nullable=False, default=1)
    special_instructions = Column(String(500), nullable=True)
    line_total = Column(Numeric(10, 2), nullable=False)

    cart = relationship("Cart", back_populates="items")
