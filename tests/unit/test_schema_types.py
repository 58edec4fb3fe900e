"""
Tests for cschema.schema.types module.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from cschema.schema.types import (
    LOCATOR_NAMESPACE,
    MARSHAL_NAMESPACE,
    DataType,
    get_type_for,
    qualify_class_name,
    qualify_strategy_class,
    short_type_name,
)
from cschema.exceptions import ValidationError


class TestQualifyClassName:
    """Test marshal type name qualification."""

    def test_bare_name_is_prefixed(self):
        assert qualify_class_name("UTF8Type") == "org.apache.cassandra.db.marshal.UTF8Type"

    def test_qualified_name_is_unchanged(self):
        name = "com.example.marshal.CustomType"
        assert qualify_class_name(name) == name

    def test_none_stays_none(self):
        assert qualify_class_name(None) is None

    def test_already_qualified_marshal_name(self):
        name = MARSHAL_NAMESPACE + "LongType"
        assert qualify_class_name(name) == name


class TestQualifyStrategyClass:
    """Test replication strategy qualification."""

    def test_bare_strategy_uses_locator_namespace(self):
        assert qualify_strategy_class("NetworkTopologyStrategy") == (
            "org.apache.cassandra.locator.NetworkTopologyStrategy"
        )

    def test_qualified_strategy_is_unchanged(self):
        name = "com.example.CustomStrategy"
        assert qualify_strategy_class(name) == name

    def test_strategy_namespace_differs_from_marshal(self):
        assert LOCATOR_NAMESPACE != MARSHAL_NAMESPACE
        assert qualify_strategy_class("SimpleStrategy") != qualify_class_name("SimpleStrategy")


class TestShortTypeName:
    """Test namespace stripping."""

    def test_strips_marshal_namespace(self):
        assert short_type_name("org.apache.cassandra.db.marshal.AsciiType") == "AsciiType"

    def test_keeps_parameters(self):
        assert short_type_name(
            "org.apache.cassandra.db.marshal.ReversedType(org.apache.cassandra.db.marshal.LongType)"
        ) == "ReversedType(org.apache.cassandra.db.marshal.LongType)"

    def test_short_name_unchanged(self):
        assert short_type_name("BytesType") == "BytesType"


class TestGetTypeFor:
    """Test codec lookup and packing."""

    @pytest.mark.parametrize("type_name,value,packed", [
        ("BytesType", b"\x00\x01", b"\x00\x01"),
        ("AsciiType", "name", b"name"),
        ("UTF8Type", "café", "café".encode("utf-8")),
        ("LongType", 1, b"\x00\x00\x00\x00\x00\x00\x00\x01"),
        ("Int32Type", -1, b"\xff\xff\xff\xff"),
        ("IntegerType", 0, b"\x00"),
        ("IntegerType", 128, b"\x00\x80"),
        ("IntegerType", -129, b"\xff\x7f"),
        ("IntegerType", 127, b"\x7f"),
        ("IntegerType", -1, b"\xff"),
        ("IntegerType", -128, b"\x80"),
        ("IntegerType", -32768, b"\x80\x00"),
        ("IntegerType", 32768, b"\x00\x80\x00"),
        ("DecimalType", Decimal("1.5"), b"\x00\x00\x00\x01\x0f"),
        ("DecimalType", Decimal("-12"), b"\x00\x00\x00\x00\xf4"),
        ("AsciiType", b"name", b"name"),
        ("UTF8Type", b"caf\xc3\xa9", b"caf\xc3\xa9"),
        ("BooleanType", True, b"\x01"),
        ("CounterColumnType", 2, b"\x00\x00\x00\x00\x00\x00\x00\x02"),
    ])
    def test_pack(self, type_name, value, packed):
        assert get_type_for(type_name).pack(value) == packed

    def test_qualified_name_resolves(self):
        data_type = get_type_for("org.apache.cassandra.db.marshal.UTF8Type")
        assert data_type.name == "UTF8Type"
        assert data_type.pack("x") == b"x"

    def test_none_means_bytes(self):
        assert get_type_for(None).name == "BytesType"

    def test_bytes_type_accepts_str(self):
        assert get_type_for("BytesType").pack("name") == b"name"

    @pytest.mark.parametrize("value", [0, 127, 128, -128, -129, -32768, 2 ** 70, -(2 ** 70)])
    def test_integer_type_unpacks_own_encoding(self, value):
        data_type = get_type_for("IntegerType")
        assert data_type.unpack(data_type.pack(value)) == value

    def test_decimal_type(self):
        data_type = get_type_for("DecimalType")
        assert data_type.unpack(data_type.pack(Decimal("12.50"))) == Decimal("12.50")
        assert data_type.pack("3.25") == data_type.pack(Decimal("3.25"))

    def test_decimal_type_rejects_non_numbers(self):
        with pytest.raises(ValidationError, match="Cannot pack"):
            get_type_for("DecimalType").pack("abc")
        with pytest.raises(ValidationError, match="finite"):
            get_type_for("DecimalType").pack(Decimal("NaN"))

    def test_uuid_types(self):
        value = uuid.uuid1()
        for type_name in ("UUIDType", "TimeUUIDType", "LexicalUUIDType"):
            data_type = get_type_for(type_name)
            assert data_type.pack(value) == value.bytes
            assert data_type.pack(str(value)) == value.bytes
            assert data_type.unpack(value.bytes) == value

    def test_date_type_packs_milliseconds(self):
        moment = datetime(2020, 1, 1, tzinfo=timezone.utc)
        packed = get_type_for("DateType").pack(moment)
        assert packed == get_type_for("LongType").pack(1577836800000)
        assert get_type_for("DateType").unpack(packed) == moment

    def test_double_and_float(self):
        assert get_type_for("DoubleType").unpack(get_type_for("DoubleType").pack(1.5)) == 1.5
        assert get_type_for("FloatType").unpack(get_type_for("FloatType").pack(0.25)) == 0.25

    def test_reversed_type_packs_as_inner(self):
        data_type = get_type_for("ReversedType(org.apache.cassandra.db.marshal.LongType)")
        assert data_type.pack(5) == get_type_for("LongType").pack(5)

    def test_composite_type(self):
        data_type = get_type_for("CompositeType(UTF8Type,LongType)")
        packed = data_type.pack(("ab", 1))
        assert packed == (
            b"\x00\x02ab\x00"
            + b"\x00\x08" + b"\x00" * 7 + b"\x01" + b"\x00"
        )
        assert data_type.unpack(packed) == ("ab", 1)

    def test_composite_type_accepts_prefix(self):
        data_type = get_type_for("CompositeType(UTF8Type,LongType)")
        assert data_type.pack("ab") == b"\x00\x02ab\x00"

    def test_composite_type_rejects_too_many_components(self):
        data_type = get_type_for("CompositeType(UTF8Type)")
        with pytest.raises(ValidationError, match="at most 1 components"):
            data_type.pack(("a", "b"))

    def test_unknown_type_raises(self):
        with pytest.raises(ValidationError, match="Unsupported column name type"):
            get_type_for("NoSuchType")

    def test_bad_value_raises_validation_error(self):
        with pytest.raises(ValidationError, match="Cannot pack"):
            get_type_for("LongType").pack("not a number")

    def test_non_ascii_rejected_by_ascii_type(self):
        with pytest.raises(ValidationError):
            get_type_for("AsciiType").pack("café")

    def test_qualified_name_property(self):
        assert get_type_for("LongType").qualified_name == MARSHAL_NAMESPACE + "LongType"

    def test_repr(self):
        assert repr(get_type_for("UTF8Type")) == "DataType(UTF8Type)"
        assert isinstance(get_type_for("UTF8Type"), DataType)
