from tooncodec.model.values import (
    Array,
    ArrayShape,
    Bool,
    Float,
    Integer,
    Null,
    Object,
    String,
    from_python,
    to_python,
)


def test_from_python_tags_scalars() -> None:
    assert from_python(None) == Null()
    assert from_python(True) == Bool(True)
    assert from_python(3) == Integer(3)
    assert from_python(2.5) == Float(2.5)
    assert from_python("x") == String("x")


def test_bool_is_not_treated_as_integer() -> None:
    assert isinstance(from_python(False), Bool)
    assert not isinstance(from_python(False), Integer)


def test_object_keeps_insertion_order() -> None:
    value = from_python({"b": 1, "a": 2, "c": 3})

    assert isinstance(value, Object)
    assert list(value.fields) == ["b", "a", "c"]


def test_to_python_round_trip() -> None:
    data = {"name": "Ada", "tags": ["x", None, 1.5], "nested": {"ok": False}}

    assert to_python(from_python(data)) == data


def test_scalar_array_shape() -> None:
    assert from_python([1, "a", None, True]).shape is ArrayShape.SCALAR
    assert Array().shape is ArrayShape.SCALAR


def test_table_shape_requires_matching_keys() -> None:
    table = from_python([{"id": 1, "name": "A"}, {"name": "B", "id": 2}])
    ragged = from_python([{"id": 1}, {"id": 2, "extra": True}])

    assert table.shape is ArrayShape.TABLE
    assert table.columns == ("id", "name")
    assert ragged.shape is ArrayShape.UNREPRESENTABLE


def test_mixed_and_empty_object_arrays_are_unrepresentable() -> None:
    assert from_python([1, {"a": 1}]).shape is ArrayShape.UNREPRESENTABLE
    assert from_python([[1], [2]]).shape is ArrayShape.UNREPRESENTABLE
    assert from_python([{}, {}]).shape is ArrayShape.UNREPRESENTABLE


def test_unknown_objects_become_strings() -> None:
    class Custom:
        def __str__(self) -> str:
            return "custom!"

    assert from_python(Custom()) == String("custom!")


def test_float_finite_flag() -> None:
    assert Float(1.0).finite
    assert not Float(float("inf")).finite
