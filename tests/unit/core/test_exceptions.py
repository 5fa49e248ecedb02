"""
Unit tests for exceptions and the diagnostics channel.
"""

import pytest

from layerpath.core.diagnostics import Diagnostic, Diagnostics
from layerpath.core.exceptions import (
    ArgumentError,
    ConfigurationError,
    GeometryError,
    InvalidGeometryError,
    LayerPathError,
    NoIntersectionError,
    ProgramError,
    RangeError,
    SlicingError,
)


@pytest.mark.unit
class TestExceptions:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        "exc_cls",
        [ArgumentError, ConfigurationError, GeometryError, SlicingError, ProgramError],
    )
    def test_base_class(self, exc_cls):
        assert issubclass(exc_cls, LayerPathError)

    @pytest.mark.parametrize("exc_cls", [InvalidGeometryError, RangeError, NoIntersectionError])
    def test_geometry_errors(self, exc_cls):
        assert issubclass(exc_cls, GeometryError)

    def test_details_in_message(self):
        error = ArgumentError("Bad distance", details={"distance": -1})
        assert str(error) == "Bad distance - Details: {'distance': -1}"
        assert error.details == {"distance": -1}

    def test_plain_message(self):
        assert str(SlicingError("Not sliced")) == "Not sliced"

    def test_range_error_bounds(self):
        error = RangeError("Outside", value=5.0, bounds=(0.0, 1.0))
        assert "bounds=(0.0, 1.0)" in str(error)
        assert error.value == 5.0

    def test_invalid_geometry_requirement(self):
        error = InvalidGeometryError("Open curve", requirement="closed")
        assert error.requirement == "closed"

    def test_program_error_object_type(self):
        assert ProgramError("Bad", object_type="PrinterSettings").object_type == "PrinterSettings"


@pytest.mark.unit
class TestDiagnostics:
    """Tests for the warning collector."""

    def test_empty(self):
        diagnostics = Diagnostics()
        assert len(diagnostics) == 0
        assert not diagnostics
        assert diagnostics.messages == []

    def test_warn(self):
        diagnostics = Diagnostics()
        entry = diagnostics.warn("slicer", "Unknown transition", value="zigzag")
        assert isinstance(entry, Diagnostic)
        assert entry.context == {"value": "zigzag"}
        assert diagnostics
        assert diagnostics.messages == ["[slicer] Unknown transition"]

    def test_extend_keeps_order(self):
        first, second = Diagnostics(), Diagnostics()
        first.warn("a", "one")
        second.warn("b", "two")
        first.extend(second)
        assert [entry.source for entry in first] == ["a", "b"]
