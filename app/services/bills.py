# app/services/bills.py
"""
Bill transaction protocol.

Every mutation runs in one scoped transaction at the writer's isolation
level: references are validated with queries on the same connection as the
writes, so either the whole change commits or none of it does.

Callers may pass ``deadline`` (a ``time.monotonic()`` value). It is checked
before each statement; once it has passed, OperationCancelledError is raised
and the open transaction is rolled back.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Sequence

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, IntegrityError

from app.db.engine import (
    FOREIGN_KEY_VIOLATION,
    SERIALIZATION_FAILURE,
    UNIQUE_VIOLATION,
    classify_db_error,
)
from app.db.schema import bill, customer, product, productbill
from app.errors import (
    ConflictError,
    InvalidDataError,
    InvalidReferenceError,
    NotFoundError,
    OperationCancelledError,
)
from app.models.bills import BillOut, BillProduct, BillVerboseOut
from app.models.customers import CustomerOut
from app.models.products import ProductOut

logger = logging.getLogger(__name__)


def _check_deadline(deadline: Optional[float]) -> None:
    if deadline is not None and time.monotonic() >= deadline:
        raise OperationCancelledError("Request deadline exceeded, changes were rolled back")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back naive
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _row_to_bill(row) -> BillOut:
    return BillOut(
        id=row["id"],
        number=row["number"],
        created_at=_as_utc(row["created_at"]),
        customer=row["customer_id"],
    )


def _check_line_items(line_items: Sequence[BillProduct]) -> None:
    """Reject input that can never be stored, without touching the database."""
    seen = set()
    for item in line_items:
        # BillProduct enforces this too, but not for model_construct callers
        if item.quantity <= 0:
            raise InvalidDataError(
                f"Quantity for product id:{item.product} must be positive"
            )
        if item.product in seen:
            raise InvalidDataError(
                f"Product id:{item.product} passed more than once"
            )
        seen.add(item.product)


class BillWriter:
    """Create, replace, read and delete bills together with their line items."""

    def __init__(self, engine: Engine, isolation_level: str = "SERIALIZABLE"):
        self.engine = engine
        self.isolation_level = isolation_level

    @contextmanager
    def _transaction(self) -> Iterator[Connection]:
        """
        Commit when the block exits normally; roll back and release the
        connection on any exception, cancellation included.
        """
        try:
            with self.engine.connect() as conn:
                conn.execution_options(isolation_level=self.isolation_level)
                with conn.begin():
                    yield conn
        except IntegrityError as exc:
            kind = classify_db_error(exc)
            if kind == FOREIGN_KEY_VIOLATION:
                raise InvalidReferenceError(
                    "Referenced customer or product does not exist"
                ) from exc
            if kind == UNIQUE_VIOLATION:
                raise ConflictError("Bill was changed by another request") from exc
            raise
        except DBAPIError as exc:
            if classify_db_error(exc) == SERIALIZATION_FAILURE:
                logger.warning("Bill transaction lost a concurrent update: %s", exc.orig)
                raise ConflictError(
                    "Bill was changed by another request, please retry"
                ) from exc
            raise

    # ---- Helpers ----

    def _bill_exists(self, conn: Connection, bill_id: int) -> bool:
        stmt = select(bill.c.id).where(bill.c.id == bill_id)
        return conn.execute(stmt).first() is not None

    def _validate_references(
        self,
        conn: Connection,
        customer_id: int,
        line_items: Sequence[BillProduct],
        deadline: Optional[float],
    ) -> None:
        _check_deadline(deadline)
        stmt = select(customer.c.id).where(customer.c.id == customer_id)
        if conn.execute(stmt).first() is None:
            logger.warning("Rejected bill for unknown customer id:%s", customer_id)
            raise InvalidReferenceError(
                f"Customer with passed id:{customer_id} does not exist"
            )

        product_ids = {item.product for item in line_items}
        if not product_ids:
            return

        # Compare distinct ids so the error can name what is missing
        _check_deadline(deadline)
        stmt = select(product.c.id).where(product.c.id.in_(product_ids))
        existing = set(conn.execute(stmt).scalars())
        missing = sorted(product_ids - existing)
        if missing:
            logger.warning("Rejected bill with unknown product ids:%s", missing)
            raise InvalidReferenceError(
                "Products with passed ids do not exist: "
                + ", ".join(str(pid) for pid in missing)
            )

    def _insert_line_items(
        self,
        conn: Connection,
        bill_id: int,
        line_items: Sequence[BillProduct],
        deadline: Optional[float],
    ) -> None:
        if not line_items:
            return
        _check_deadline(deadline)
        conn.execute(
            insert(productbill),
            [
                {
                    "product_id": item.product,
                    "bill_id": bill_id,
                    "quantity": item.quantity,
                }
                for item in line_items
            ],
        )

    # ---- Mutations ----

    def create_bill(
        self,
        customer_id: int,
        line_items: Sequence[BillProduct],
        deadline: Optional[float] = None,
    ) -> BillOut:
        _check_line_items(line_items)

        number = str(uuid.uuid4())
        created_at = datetime.now(timezone.utc)

        with self._transaction() as conn:
            self._validate_references(conn, customer_id, line_items, deadline)

            _check_deadline(deadline)
            result = conn.execute(
                insert(bill).values(
                    number=number,
                    created_at=created_at,
                    customer_id=customer_id,
                )
            )
            bill_id = result.inserted_primary_key[0]

            self._insert_line_items(conn, bill_id, line_items, deadline)

        logger.info(
            "Created bill id:%s number:%s with %s line items",
            bill_id, number, len(line_items),
        )
        return BillOut(
            id=bill_id,
            number=number,
            created_at=created_at,
            customer=customer_id,
        )

    def replace_bill_contents(
        self,
        bill_id: int,
        customer_id: int,
        line_items: Sequence[BillProduct],
        deadline: Optional[float] = None,
    ) -> None:
        """
        Point the bill at ``customer_id`` and swap its whole line-item set for
        ``line_items``. Number and creation time stay as they are.
        """
        _check_line_items(line_items)

        with self._transaction() as conn:
            _check_deadline(deadline)
            if not self._bill_exists(conn, bill_id):
                raise NotFoundError(f"Bill with passed id:{bill_id} does not exist")

            self._validate_references(conn, customer_id, line_items, deadline)

            _check_deadline(deadline)
            conn.execute(
                update(bill)
                .where(bill.c.id == bill_id)
                .values(customer_id=customer_id)
            )

            _check_deadline(deadline)
            conn.execute(delete(productbill).where(productbill.c.bill_id == bill_id))

            self._insert_line_items(conn, bill_id, line_items, deadline)

        logger.info(
            "Replaced contents of bill id:%s (%s line items)", bill_id, len(line_items)
        )

    def add_line_item(
        self,
        bill_id: int,
        product_id: int,
        quantity: int,
        deadline: Optional[float] = None,
    ) -> None:
        """Single insert; the table's constraints do the checking."""
        if quantity <= 0:
            raise InvalidDataError(f"Quantity for product id:{product_id} must be positive")

        with self._transaction() as conn:
            _check_deadline(deadline)
            try:
                conn.execute(
                    insert(productbill).values(
                        product_id=product_id,
                        bill_id=bill_id,
                        quantity=quantity,
                    )
                )
            except IntegrityError as exc:
                kind = classify_db_error(exc)
                if kind == UNIQUE_VIOLATION:
                    raise ConflictError("Passed product already exists in bill") from exc
                if kind == FOREIGN_KEY_VIOLATION:
                    raise InvalidReferenceError("Passed product or bill does not exist") from exc
                raise

    def remove_line_item(
        self,
        bill_id: int,
        product_id: int,
        deadline: Optional[float] = None,
    ) -> None:
        with self._transaction() as conn:
            _check_deadline(deadline)
            conn.execute(
                delete(productbill).where(
                    productbill.c.bill_id == bill_id,
                    productbill.c.product_id == product_id,
                )
            )

    def delete_bill(self, bill_id: int, deadline: Optional[float] = None) -> None:
        with self._transaction() as conn:
            _check_deadline(deadline)
            # productbill also cascades; clearing it here keeps the result
            # the same on databases created without that constraint
            conn.execute(delete(productbill).where(productbill.c.bill_id == bill_id))

            _check_deadline(deadline)
            result = conn.execute(delete(bill).where(bill.c.id == bill_id))
            if result.rowcount == 0:
                raise NotFoundError(f"Bill with passed id:{bill_id} does not exist")

        logger.info("Deleted bill id:%s", bill_id)

    # ---- Reads ----

    def read_bill_detail(
        self, bill_id: int, deadline: Optional[float] = None
    ) -> BillVerboseOut:
        """Bill header, its customer and its line items from one snapshot."""
        with self._transaction() as conn:
            _check_deadline(deadline)
            stmt = (
                select(
                    bill.c.id,
                    bill.c.number,
                    bill.c.created_at,
                    customer.c.id.label("customer_id"),
                    customer.c.first_name,
                    customer.c.last_name,
                )
                .select_from(bill.join(customer))
                .where(bill.c.id == bill_id)
            )
            header = conn.execute(stmt).mappings().first()
            if header is None:
                raise NotFoundError(f"Bill with passed id:{bill_id} does not exist")

            _check_deadline(deadline)
            stmt = (
                select(productbill.c.product_id, productbill.c.quantity)
                .where(productbill.c.bill_id == bill_id)
                .order_by(productbill.c.product_id)
            )
            items = conn.execute(stmt).mappings().all()

        return BillVerboseOut(
            id=header["id"],
            number=header["number"],
            created_at=_as_utc(header["created_at"]),
            customer=CustomerOut(
                id=header["customer_id"],
                first_name=header["first_name"],
                last_name=header["last_name"],
            ),
            products=[
                BillProduct(product=row["product_id"], quantity=row["quantity"])
                for row in items
            ],
        )

    def list_bills(self, deadline: Optional[float] = None) -> List[BillOut]:
        with self.engine.connect() as conn:
            _check_deadline(deadline)
            stmt = select(
                bill.c.id, bill.c.number, bill.c.created_at, bill.c.customer_id
            ).order_by(bill.c.id)
            rows = conn.execute(stmt).mappings().all()

        return [_row_to_bill(row) for row in rows]

    def list_bill_products(
        self, bill_id: int, deadline: Optional[float] = None
    ) -> List[ProductOut]:
        with self._transaction() as conn:
            _check_deadline(deadline)
            if not self._bill_exists(conn, bill_id):
                raise NotFoundError(f"Bill with passed id:{bill_id} does not exist")

            stmt = (
                select(
                    product.c.id,
                    product.c.name,
                    product.c.description,
                    product.c.price,
                    product.c.quantity,
                )
                .select_from(product.join(productbill))
                .where(productbill.c.bill_id == bill_id)
                .order_by(product.c.id)
            )
            rows = conn.execute(stmt).mappings().all()

        return [ProductOut(**row) for row in rows]
