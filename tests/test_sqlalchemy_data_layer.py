"""Tests for the SQLAlchemy data layer against an in-memory SQLite database."""

from typing import List, Optional

import pytest
from sqlalchemy import ForeignKey, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship

from hateoas_kit import (
    JSONAPI,
    LinkContext,
    ResourceNotFoundError,
    ResourceRepresenter,
    UnresolvableRelationError,
)
from hateoas_kit.sqlalchemy import SQLAlchemyDataLayer


class Base(DeclarativeBase):
    pass


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str]


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    total: Mapped[int]
    customer_id: Mapped[Optional[int]] = mapped_column(ForeignKey("customers.id"))
    customer: Mapped[Optional[Customer]] = relationship()
    items: Mapped[List["OrderItem"]] = relationship(back_populates="order", order_by="OrderItem.id")


class OrderItem(Base):
    __tablename__ = "order_items"

    id: Mapped[str] = mapped_column(primary_key=True)
    sku: Mapped[str]
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"))
    order: Mapped[Order] = relationship(back_populates="items")


MODELS = {"customer": Customer, "order": Order, "orderItem": OrderItem}


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as setup:
        customer = Customer(id=1, name="Ada")
        setup.add_all(
            [
                Order(
                    id=1,
                    total=42,
                    customer=customer,
                    items=[OrderItem(id="a", sku="A"), OrderItem(id="b", sku="B")],
                ),
                Order(id=2, total=0),
            ]
        )
        setup.commit()
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def data_layer(session):
    return SQLAlchemyDataLayer(session=session, models=MODELS)


class TestSQLAlchemyDataLayer:
    def test_load_resource(self, data_layer):
        order = data_layer.load_resource("order", "1")
        assert order.key == ("order", "1")
        assert order.attributes == {"total": 42}
        assert sorted(order.relationship_names) == ["customer", "items"]

    def test_unloaded_relationships_have_no_ids(self, data_layer):
        order = data_layer.load_resource("order", "1")
        assert order.relationship("items").ids is None
        assert order.relationship("items").target_type == "orderItem"
        assert order.relationship("customer").ids is None

    def test_loaded_relationships_have_ids(self, data_layer, session):
        instance = session.get(Order, 1)
        instance.items
        instance.customer
        order = data_layer.to_resource(instance)
        assert order.relationship("items").ids == ("a", "b")
        assert order.relationship("customer").ids == ("1",)

    def test_load_related(self, data_layer):
        items = data_layer.load_related("order", "1", "items")
        assert [item.id for item in items] == ["a", "b"]
        assert items[0].attributes == {"sku": "A"}
        assert [customer.attributes for customer in data_layer.load_related("order", "1", "customer")] == [
            {"name": "Ada"}
        ]

    def test_load_related_empty_to_one(self, data_layer):
        assert data_layer.load_related("order", "2", "customer") == []

    def test_missing_resource(self, data_layer):
        assert data_layer.load_resource("order", "99") is None
        with pytest.raises(ResourceNotFoundError):
            data_layer.load_related("order", "99", "items")

    def test_unknown_type(self, data_layer):
        with pytest.raises(ResourceNotFoundError):
            data_layer.load_resource("invoice", "1")

    def test_unknown_relation(self, data_layer):
        with pytest.raises(UnresolvableRelationError):
            data_layer.load_related("order", "1", "payments")

    def test_represent_with_embedded_items(self, data_layer):
        representer = ResourceRepresenter(data_layer, LinkContext(base_url="/api"))
        document = representer.represent(
            "order", "1", JSONAPI, context=representer.context.with_embed(["items"])
        )
        assert document["data"]["relationships"]["items"]["data"] == [
            {"type": "orderItem", "id": "a"},
            {"type": "orderItem", "id": "b"},
        ]
        assert [entry["id"] for entry in document["included"]] == ["a", "b"]
        # customer was never loaded, so its linkage is unresolved
        assert document["data"]["relationships"]["customer"]["data"] is None
