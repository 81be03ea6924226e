from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

import pytest

from sheetbind.mapping.registry import TypeRegistry, default_registry, descriptor_for, excel_field
from sheetbind.models.descriptors import FieldKind


@dataclass
class Product:
    code: str = excel_field("Code, SKU", required=True)
    name: str = excel_field(col=2)
    price: float = excel_field(letter="c", rules={"exclusiveMinimum": 0})
    active: bool = excel_field(["Active"])
    since: datetime | None = excel_field("Since", fmt="%Y-%m-%d")
    stock: int = excel_field("Stock", kind=FieldKind.UINT)
    sold_on: Optional[date] = excel_field("Sold")
    tags: list = excel_field("Tags")
    note: str = "unmapped"
    extra: str = field(default="", metadata={"other": 1})


def test_descriptor_fields_in_declaration_order():
    td = TypeRegistry().get(Product)
    assert [f.name for f in td.fields] == ["code", "name", "price", "active", "since", "stock", "sold_on", "tags"]


def test_hints_are_normalized():
    td = TypeRegistry().get(Product)
    code = td.by_name["code"]
    assert code.headers == ("Code", "SKU")
    assert code.required is True
    assert td.by_name["name"].column == 1
    assert td.by_name["price"].letter == "C"
    assert td.by_name["price"].rules == {"exclusiveMinimum": 0}
    assert td.by_name["since"].time_format == "%Y-%m-%d"
    assert td.by_header["sku"] is code


def test_kinds_inferred_from_annotations():
    td = TypeRegistry().get(Product)
    kinds = {f.name: (f.kind, f.nullable) for f in td.fields}
    assert kinds["code"] == (FieldKind.TEXT, False)
    assert kinds["price"] == (FieldKind.FLOAT, False)
    assert kinds["active"] == (FieldKind.BOOL, False)
    assert kinds["since"] == (FieldKind.DATETIME, True)
    assert kinds["stock"] == (FieldKind.UINT, False)
    assert kinds["sold_on"] == (FieldKind.DATE, True)
    assert kinds["tags"] == (FieldKind.UNSUPPORTED, False)


def test_non_positive_column_hint_is_ignored():
    @dataclass
    class Rec:
        a: str = excel_field("A", col=0)
        b: str = excel_field("B", col=-3)

    td = TypeRegistry().get(Rec)
    assert td.by_name["a"].column is None
    assert td.by_name["b"].column is None


def test_registry_caches_per_type():
    registry = TypeRegistry()
    first = registry.get(Product)
    assert registry.get(Product) is first
    assert Product in registry
    assert len(registry) == 1


def test_descriptor_for_uses_default_registry():
    td = descriptor_for(Product)
    assert default_registry.get(Product) is td


def test_descriptor_for_uses_empty_injected_registry():
    registry = TypeRegistry()
    td = descriptor_for(Product, registry)
    assert Product in registry
    assert registry.get(Product) is td


def test_non_dataclass_rejected():
    class Plain:
        code: str = "x"

    with pytest.raises(TypeError):
        TypeRegistry().get(Plain)


def test_type_without_mapped_fields_is_empty():
    @dataclass
    class Nothing:
        value: int = 0

    td = TypeRegistry().get(Nothing)
    assert len(td) == 0


def test_concurrent_first_use_builds_once():
    @dataclass
    class Rec:
        code: str = excel_field("Code")

    registry = TypeRegistry()
    results = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        results.append(registry.get(Rec))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(results) == 8
    assert all(r is results[0] for r in results)


def test_excel_field_keeps_explicit_default():
    @dataclass
    class Rec:
        qty: int = excel_field("Qty", default=5)
        tags: list = excel_field("Tags", default_factory=list)

    td = TypeRegistry().get(Rec)
    assert td.by_name["qty"].has_default is True
    assert Rec().qty == 5
    assert Rec().tags == []
