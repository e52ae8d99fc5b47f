"""Tests for structured value kinds."""

import pytest as _pytest

import layerparams.values as values


class TestKindOf:
    """kind_of() maps Python values onto the tagged union."""

    @_pytest.mark.parametrize(
        ("value", "kind"),
        [
            (None, values.ValueKind.NULL),
            (True, values.ValueKind.BOOL),
            (False, values.ValueKind.BOOL),
            (0, values.ValueKind.INT),
            (1.5, values.ValueKind.FLOAT),
            ("text", values.ValueKind.STRING),
            ([1, 2], values.ValueKind.SEQUENCE),
            ({"a": 1}, values.ValueKind.MAPPING),
        ],
    )
    def test_kinds(self, value: object, kind: values.ValueKind) -> None:
        """Each native type has exactly one kind."""
        assert values.kind_of(value) is kind

    def test_bool_is_not_int(self) -> None:
        """bool is checked before int."""
        assert values.kind_of(True) is not values.ValueKind.INT

    def test_unsupported_type_raises(self) -> None:
        """Values outside the union are rejected."""
        with _pytest.raises(TypeError, match="set"):
            values.kind_of({1, 2})


class TestIsMapping:
    """is_mapping() separates interior nodes from leaves."""

    def test_mapping(self) -> None:
        """Only dicts are mappings."""
        assert values.is_mapping({})
        assert values.is_mapping({"a": {"b": 1}})

    @_pytest.mark.parametrize("value", [None, True, 0, 1.5, "text", [], [{"a": 1}]])
    def test_leaves(self, value: object) -> None:
        """Scalars, null and sequences (even of mappings) are leaves."""
        assert not values.is_mapping(value)


class TestWidenInt:
    """Integers stay exact inside 64 bits."""

    def test_int64_bounds_stay_int(self) -> None:
        """Both ends of the signed 64-bit range are kept exact."""
        assert values.widen_int(2**63 - 1) == 2**63 - 1
        assert isinstance(values.widen_int(-(2**63)), int)

    def test_out_of_range_widens_to_float(self) -> None:
        """One past the range becomes a float."""
        widened = values.widen_int(2**63)
        assert isinstance(widened, float)
        assert widened == float(2**63)
