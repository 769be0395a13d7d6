"""Tests for the value models: coordinates, bounding boxes, roof polygons, edges."""

from __future__ import annotations

import pytest

from roof_outline.core.constants import Precision
from roof_outline.models._validation import ModelValidationError
from roof_outline.models.drawing import (
    IDENTITY_TRANSFORM,
    AlignmentTransform,
    Edge,
    EdgeType,
    edge_totals,
    line_length_ft,
)
from roof_outline.models.geometry import BoundingBox, GeoPoint, PixelPoint
from roof_outline.models.imagery import AerialImage, ProviderConfig
from roof_outline.models.roof import RoofPolygon


class TestGeoPoint:
    def test_out_of_range_rejected(self) -> None:
        with pytest.raises(ModelValidationError):
            GeoPoint(lng=181.0, lat=0.0)
        with pytest.raises(ModelValidationError):
            GeoPoint(lng=0.0, lat=-91.0)

    def test_geojson_order(self) -> None:
        point = GeoPoint.from_lng_lat([-104.99, 39.74])
        assert point.lng == -104.99
        assert point.as_lng_lat() == [-104.99, 39.74]

    def test_short_position(self) -> None:
        with pytest.raises(ModelValidationError):
            GeoPoint.from_lng_lat([1.0])


class TestBoundingBox:
    def test_around(self, site_center) -> None:
        bbox = BoundingBox.around(site_center, Precision.HIGH.margin_deg)
        assert bbox.width_deg == pytest.approx(0.0006)
        assert bbox.height_deg == pytest.approx(0.0006)
        assert bbox.center.lng == pytest.approx(site_center.lng)
        assert bbox.contains(site_center)

    def test_precision_margins(self) -> None:
        assert Precision.HIGH.margin_deg == 0.0003
        assert Precision.STANDARD.margin_deg == 0.0005

    def test_inverted_rejected(self) -> None:
        with pytest.raises(ModelValidationError):
            BoundingBox(west=1.0, south=0.0, east=0.0, north=1.0)

    def test_non_positive_margin(self, site_center) -> None:
        with pytest.raises(ModelValidationError):
            BoundingBox.around(site_center, 0)

    def test_dict_round_trip(self, site_bbox) -> None:
        assert BoundingBox.from_dict(site_bbox.to_dict()) == site_bbox

    def test_from_dict_missing_key(self) -> None:
        with pytest.raises(ModelValidationError, match="north"):
            BoundingBox.from_dict({"west": 0, "south": 0, "east": 1})

    def test_from_dict_non_numeric(self) -> None:
        with pytest.raises(ModelValidationError, match="east"):
            BoundingBox.from_dict({"west": 0, "south": 0, "east": "far", "north": 1})


class TestPixelPoint:
    def test_from_dict(self) -> None:
        assert PixelPoint.from_dict({"x": "12.5", "y": 3}) == PixelPoint(12.5, 3.0)

    @pytest.mark.parametrize("data", [{"y": 5}, {"x": None, "y": 5}, {"x": "abc", "y": 5}, {"x": True, "y": 5}])
    def test_malformed_x(self, data) -> None:
        with pytest.raises(ModelValidationError) as exc_info:
            PixelPoint.from_dict(data)
        assert exc_info.value.field_name == "x"


class TestRoofPolygon:
    def test_from_ring_closes_and_measures(self, site_center, make_rectangle) -> None:
        polygon = make_rectangle(site_center, 50, 40)
        assert polygon.ring[0] == polygon.ring[-1]
        assert len(polygon.ring) == 5
        assert polygon.area_sq_ft == pytest.approx(2000, rel=1e-3)
        assert polygon.perimeter_ft == pytest.approx(180, rel=5e-3)

    @pytest.mark.parametrize(("confidence", "included"), [(0.7, True), (0.69, False), (0.95, True)])
    def test_included(self, site_center, make_rectangle, confidence, included) -> None:
        assert make_rectangle(site_center, 50, 40, confidence=confidence).included is included

    def test_confidence_range(self, site_center, make_rectangle) -> None:
        with pytest.raises(ModelValidationError):
            make_rectangle(site_center, 50, 40, confidence=1.2)

    def test_empty_id_rejected(self, site_center) -> None:
        with pytest.raises(ModelValidationError):
            RoofPolygon.from_ring("", [site_center, site_center, site_center], confidence=0.5)

    def test_feature_shape(self, site_center, make_rectangle) -> None:
        feature = make_rectangle(site_center, 50, 40, polygon_id="C").to_feature()
        assert feature["id"] == "C"
        assert feature["type"] == "Feature"
        assert feature["geometry"]["type"] == "Polygon"
        assert len(feature["geometry"]["coordinates"][0]) == 5
        assert set(feature["properties"]) == {"area_sq_ft", "perimeter_ft", "confidence", "included"}


class TestEdge:
    def test_length_derived(self) -> None:
        edge = Edge.between(PixelPoint(0, 0), PixelPoint(30, 40))
        assert edge.length_ft == 5.0
        assert edge.pixel_length == 50.0
        assert edge.id

    def test_length_rounded_to_tenth(self) -> None:
        assert line_length_ft(PixelPoint(0, 0), PixelPoint(33, 0), 10) == 3.3
        assert line_length_ft(PixelPoint(0, 0), PixelPoint(1, 1), 3) == 0.5

    def test_invalid_scale_uses_default(self) -> None:
        assert line_length_ft(PixelPoint(0, 0), PixelPoint(100, 0), 0) == 10.0
        assert line_length_ft(PixelPoint(0, 0), PixelPoint(100, 0), None) == 10.0

    def test_angle(self) -> None:
        assert Edge.between(PixelPoint(0, 0), PixelPoint(0, 10)).angle_deg == pytest.approx(90)
        assert Edge.between(PixelPoint(0, 0), PixelPoint(0, -10)).angle_deg == pytest.approx(270)

    def test_with_endpoint_recomputes_length(self) -> None:
        edge = Edge.between(PixelPoint(0, 0), PixelPoint(100, 0), edge_id="e1")
        moved = edge.with_endpoint("start", PixelPoint(50, 0))
        assert moved.id == "e1"
        assert moved.length_ft == 5.0
        assert edge.length_ft == 10.0

    def test_with_endpoint_rejects_unknown_end(self) -> None:
        edge = Edge.between(PixelPoint(0, 0), PixelPoint(100, 0))
        with pytest.raises(ModelValidationError):
            edge.with_endpoint("middle", PixelPoint(1, 1))

    def test_from_dict_ignores_stored_length(self) -> None:
        edge = Edge.from_dict(
            {
                "id": "e1",
                "start": {"x": 0, "y": 0},
                "end": {"x": 0, "y": 200},
                "length_ft": 999,
                "edge_type": "pitch-change",
            }
        )
        assert edge.length_ft == 20.0
        assert edge.edge_type is EdgeType.PITCH_CHANGE

    def test_from_dict_requires_endpoints(self) -> None:
        with pytest.raises(ModelValidationError):
            Edge.from_dict({"id": "e1", "start": {"x": 0, "y": 0}})

    def test_to_dict(self) -> None:
        edge = Edge.between(PixelPoint(0, 0), PixelPoint(10, 0), edge_id="e1", edge_type=EdgeType.EAVE)
        assert edge.to_dict() == {
            "id": "e1",
            "start": {"x": 0, "y": 0},
            "end": {"x": 10, "y": 0},
            "length_ft": 1.0,
            "edge_type": "eave",
        }


class TestEdgeType:
    def test_parse_defaults_to_unlabeled(self) -> None:
        assert EdgeType.parse(None) is EdgeType.UNLABELED
        assert EdgeType.parse("") is EdgeType.UNLABELED

    def test_parse_case_insensitive(self) -> None:
        assert EdgeType.parse("Ridge") is EdgeType.RIDGE

    def test_parse_unknown(self) -> None:
        with pytest.raises(ModelValidationError, match="unknown edge type"):
            EdgeType.parse("gutter")


class TestEdgeTotals:
    def test_grouped_by_type(self) -> None:
        edges = [
            Edge.between(PixelPoint(0, 0), PixelPoint(100, 0), edge_type=EdgeType.EAVE),
            Edge.between(PixelPoint(0, 0), PixelPoint(55, 0), edge_type=EdgeType.EAVE),
            Edge.between(PixelPoint(0, 0), PixelPoint(0, 30), edge_type=EdgeType.HIP),
        ]
        assert edge_totals(edges) == {"eave": 15.5, "hip": 3.0}

    def test_empty(self) -> None:
        assert edge_totals([]) == {}


class TestAlignmentTransform:
    def test_identity(self) -> None:
        assert IDENTITY_TRANSFORM.is_identity
        assert not AlignmentTransform(offset_x=1).is_identity

    def test_moves_and_rotations_return_new_values(self) -> None:
        moved = IDENTITY_TRANSFORM.moved(10, -5).rotated(2)
        assert moved == AlignmentTransform(offset_x=10, offset_y=-5, rotation_degrees=2)
        assert IDENTITY_TRANSFORM.is_identity

    def test_from_dict_defaults(self) -> None:
        assert AlignmentTransform.from_dict(None) == IDENTITY_TRANSFORM
        assert AlignmentTransform.from_dict({"rotation_degrees": 3}) == AlignmentTransform(
            rotation_degrees=3
        )


class TestImageryModels:
    def test_empty_content_rejected(self, site_bbox) -> None:
        with pytest.raises(ModelValidationError):
            AerialImage(content=b"", content_type="image/jpeg", provider="p", source_url="", bounds=site_bbox)

    def test_extension(self, aerial_image, site_bbox) -> None:
        assert aerial_image.extension == "jpg"
        png = AerialImage(
            content=b"\x89PNG", content_type="image/png", provider="p", source_url="", bounds=site_bbox
        )
        assert png.extension == "png"

    def test_provider_config_requires_name(self) -> None:
        with pytest.raises(ModelValidationError):
            ProviderConfig(name="")
