"""
Order aggregation.

OrderService owns order CRUD and the paid/unpaid status. Totals come from
app.modules.orders.calculator; the payment recorder calls recompute_status
after every payment change, inside its own transaction.
"""

import logging
from decimal import Decimal
from typing import Dict, Any, Optional

from fastapi import HTTPException
from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.common.exceptions import NotFoundError, ValidationError, ConflictError, internal_error
from app.modules.clients.service import ClientService
from app.modules.invoices.models import Invoice
from app.modules.orders import calculator
from app.modules.orders.models import Order, OrderLineItem, OrderServiceItem
from app.modules.orders.schemas import OrderCreate, OrderUpdate
from app.modules.products.service import ProductService
from app.modules.registers.service import RegisterSessionService
from app.modules.services.service import ServiceCatalogService

logger = logging.getLogger(__name__)


class OrderService:
    """Orders, their items and their paid status"""

    def __init__(self, db: Session):
        self.db = db

    # ===== HELPERS =====

    def _build_items(self, order: Order, order_data: OrderCreate) -> None:
        """Attach product lines and service items, defaulting prices to the catalogue."""
        if not order_data.items and not order_data.services:
            raise ValidationError("An order needs at least one product or service")

        products = ProductService(self.db)
        for position, line in enumerate(order_data.items):
            product = products.get_product_by_id(line.product_id)
            unit_price = line.unit_price if line.unit_price is not None else Decimal(product.price)
            if line.discount > unit_price * line.quantity:
                raise ValidationError(f"Discount exceeds the line total for product {product.id}")
            order.items.append(OrderLineItem(
                product_id=product.id,
                unit_price=unit_price,
                quantity=line.quantity,
                discount=line.discount,
                position=position
            ))

        catalog = ServiceCatalogService(self.db)
        for position, item in enumerate(order_data.services):
            service = catalog.get_service_by_id(item.service_id)
            price = item.price if item.price is not None else Decimal(service.price)
            if item.discount > price:
                raise ValidationError(f"Discount exceeds the price of service {service.id}")
            order.services.append(OrderServiceItem(
                service_id=service.id,
                price=price,
                discount=item.discount,
                position=position
            ))

        if order_data.global_discount > calculator.compute_subtotal(order):
            raise ValidationError("Global discount exceeds the order subtotal")

    # ===== CRUD =====

    def create_order(self, order_data: OrderCreate) -> Order:
        try:
            ClientService(self.db).get_client_by_id(order_data.client_id)
            active = RegisterSessionService(self.db).find_active_session()

            order = Order(
                client_id=order_data.client_id,
                global_discount=order_data.global_discount,
                is_paid=False,
                session_id=active.id if active else None
            )
            self._build_items(order, order_data)
            self.db.add(order)
            self.db.commit()
            self.db.refresh(order)

            logger.info(f"Order {order.id} created for client {order.client_id}, total {order.total}")
            return order

        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(f"Order could not be saved: {e.orig}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Creating order failed: {e}")
            raise internal_error("creating order", e)

    def get_order(self, order_id: int) -> Order:
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError("Order not found")
        return order

    def list_orders(
        self,
        limit: int = settings.DEFAULT_PAGE_SIZE,
        offset: int = 0,
        is_paid: Optional[bool] = None,
        client_id: Optional[int] = None
    ) -> Dict[str, Any]:
        query = self.db.query(Order)
        if is_paid is not None:
            query = query.filter(Order.is_paid.is_(is_paid))
        if client_id is not None:
            query = query.filter(Order.client_id == client_id)

        total = query.count()
        orders = query.order_by(desc(Order.id)).offset(offset).limit(limit).all()
        return {
            "orders": orders,
            "total": total,
            "limit": limit,
            "offset": offset
        }

    def update_order(self, order_id: int, order_data: OrderUpdate) -> Order:
        """Replace client, items and global discount, then recompute the paid status."""
        try:
            order = self.get_order(order_id)
            ClientService(self.db).get_client_by_id(order_data.client_id)

            order.client_id = order_data.client_id
            order.global_discount = order_data.global_discount
            order.items.clear()
            order.services.clear()
            self.db.flush()
            self._build_items(order, order_data)
            self.recompute_status(order)

            self.db.commit()
            self.db.refresh(order)
            logger.info(f"Order {order.id} updated, total {order.total}, paid {order.is_paid}")
            return order

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Updating order {order_id} failed: {e}")
            raise internal_error("updating order", e)

    def delete_order(self, order_id: int) -> Dict[str, str]:
        """
        Delete an order with its items and payments.

        Cash already taken for its payments stays in the register. An
        invoiced order cannot be deleted.
        """
        order = self.get_order(order_id)
        invoiced = self.db.query(Invoice.id).filter(Invoice.order_id == order_id).first()
        if invoiced:
            raise ConflictError("Order is referenced by an invoice")
        try:
            self.db.delete(order)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Order is referenced by an invoice")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Deleting order {order_id} failed: {e}")
            raise internal_error("deleting order", e)

        logger.info(f"Order {order_id} deleted")
        return {"message": "Order deleted"}

    # ===== STATUS =====

    def recompute_status(self, order: Order) -> bool:
        """
        Set ``is_paid`` from the order's current payments. Does not commit.
        """
        remaining = calculator.compute_remaining_due(order, order.payments)
        order.is_paid = calculator.is_settled(remaining)
        return order.is_paid

    def _set_paid(self, order_id: int, paid: bool) -> Order:
        order = self.get_order(order_id)
        order.is_paid = paid
        self.db.commit()
        self.db.refresh(order)
        logger.info(f"Order {order_id} manually marked {'paid' if paid else 'unpaid'}")
        return order

    def mark_paid(self, order_id: int) -> Order:
        return self._set_paid(order_id, True)

    def mark_unpaid(self, order_id: int) -> Order:
        return self._set_paid(order_id, False)

    def get_summary(self, order_id: int) -> Dict[str, Any]:
        order = self.get_order(order_id)
        return calculator.build_summary(order, order.payments)
