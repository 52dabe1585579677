# ============================================================================
# SCENE BINDER TESTS
# ============================================================================
# STATUS: Tests - Binding installed datasets to a display scene
# PURPOSE: Verify layer placement, preview removal and elevation merging
# CREATED: 18 OCT 2026
# ============================================================================
"""
Scene Binder Tests

Run with:
    pytest tests/test_scene_binder.py -v
"""

from unittest.mock import MagicMock
from xml.etree import ElementTree as ET

from core.contracts import ParamKey, PREVIEW_LAYER
from core.documents import append_sector
from core.models import Sector
from services.scene_binder import (
    CompoundElevationModel,
    ElevationModel,
    Layer,
    LayerFactory,
    PLACE_NAMES_LAYER,
    Renderable,
    SURFACE_IMAGE,
    Scene,
    SingleElevationModel,
    add_to_scene,
    find_elevation_model,
    find_layer,
)

SECTOR = Sector.from_degrees(40.0, 41.0, -106.0, -105.0)


# ============================================================================
# HELPERS
# ============================================================================

def _document(tag, name, sector=SECTOR):
    root = ET.Element(tag, {"version": "1"})
    ET.SubElement(root, "DisplayName").text = name
    ET.SubElement(root, "DatasetName").text = name
    if sector is not None:
        append_sector(root, "Sector", sector)
    return root


def _scene(**kwargs):
    layers = [Layer("Stars"), Layer("Blue Marble"), Layer(PLACE_NAMES_LAYER), Layer("Compass")]
    return Scene(layers=layers, **kwargs)


# ============================================================================
# DISPATCH
# ============================================================================

class TestDispatch:

    def test_layer(self):
        scene = _scene()
        added = add_to_scene(scene, _document("Layer", "ortho"), {})
        assert isinstance(added, Layer)

    def test_elevation_model_case_insensitive(self):
        scene = _scene()
        added = add_to_scene(scene, _document("elevationModel", "dem"), {})
        assert isinstance(added, ElevationModel)

    def test_unknown_root_ignored(self):
        scene = _scene()
        assert add_to_scene(scene, ET.Element("RasterServer"), {}) is None
        assert len(scene.layers) == 4


# ============================================================================
# LAYER PATH
# ============================================================================

class TestLayerPath:

    def test_inserted_before_place_names(self):
        scene = _scene()
        data_set = {}
        add_to_scene(scene, _document("Layer", "ortho"), data_set)

        names = [layer.name for layer in scene.layers]
        assert names == ["Stars", "Blue Marble", "ortho", PLACE_NAMES_LAYER, "Compass"]
        assert data_set[ParamKey.DISPLAY_NAME] == "ortho"

    def test_appended_without_place_names(self):
        scene = Scene(layers=[Layer("Stars")])
        add_to_scene(scene, _document("Layer", "ortho"), {})
        assert [layer.name for layer in scene.layers] == ["Stars", "ortho"]

    def test_layer_enabled_with_sector(self):
        layer = add_to_scene(_scene(), _document("Layer", "ortho"), {})
        assert layer.enabled
        assert layer.sector == SECTOR

    def test_replaces_same_named_layer(self):
        scene = _scene()
        add_to_scene(scene, _document("Layer", "ortho"), {})
        add_to_scene(scene, _document("Layer", "ortho"), {})
        assert sum(1 for layer in scene.layers if layer.name == "ortho") == 1

    def test_preview_surface_image_removed(self):
        preview = Layer(
            "ortho preview",
            values={PREVIEW_LAYER: True},
            renderables=[Renderable("outline"), Renderable(SURFACE_IMAGE), Renderable(SURFACE_IMAGE)],
        )
        scene = _scene()
        scene.layers.append(preview)

        add_to_scene(scene, _document("Layer", "ortho"), {ParamKey.LAYER: preview})

        assert [r.kind for r in preview.renderables] == ["outline", SURFACE_IMAGE]

    def test_non_preview_layer_untouched(self):
        other = Layer("other", renderables=[Renderable(SURFACE_IMAGE)])
        add_to_scene(_scene(), _document("Layer", "ortho"), {ParamKey.LAYER: other})
        assert len(other.renderables) == 1

    def test_go_to_sector(self):
        go_to = MagicMock()
        add_to_scene(_scene(go_to=go_to), _document("Layer", "ortho"), {})
        go_to.assert_called_once_with(SECTOR)

    def test_no_go_to_for_full_sphere(self):
        go_to = MagicMock()
        add_to_scene(_scene(go_to=go_to), _document("Layer", "globe", Sector.full_sphere()), {})
        go_to.assert_not_called()

    def test_go_to_disabled(self):
        go_to = MagicMock()
        add_to_scene(_scene(go_to=go_to), _document("Layer", "ortho"), {}, go_to=False)
        go_to.assert_not_called()

    def test_factory_failure_logged_not_raised(self, caplog):
        factory = MagicMock(spec=LayerFactory)
        factory.create_from_config.side_effect = RuntimeError("bad document")
        scene = _scene()

        with caplog.at_level("ERROR"):
            added = add_to_scene(scene, _document("Layer", "ortho"), {}, layer_factory=factory)

        assert added is None
        assert len(scene.layers) == 4
        assert any("Creation from configuration failed" in r.getMessage() for r in caplog.records)
        assert any(r.exc_info for r in caplog.records)

    def test_find_layer(self):
        scene = _scene()
        assert find_layer(scene, "Compass") is scene.layers[3]
        assert find_layer(scene, "missing") is None


# ============================================================================
# ELEVATION PATH
# ============================================================================

class TestElevationPath:

    def test_single_wrapped_into_compound(self):
        earth = ElevationModel("Earth")
        scene = _scene(elevation=SingleElevationModel(earth))

        add_to_scene(scene, _document("ElevationModel", "dem"), {})

        assert isinstance(scene.elevation, CompoundElevationModel)
        assert [m.name for m in scene.elevation.models] == ["Earth", "dem"]
        assert scene.elevation.models[0] is earth

    def test_compound_extended(self):
        compound = CompoundElevationModel([ElevationModel("Earth"), ElevationModel("srtm")])
        scene = _scene(elevation=compound)

        add_to_scene(scene, _document("ElevationModel", "dem"), {})

        assert scene.elevation is compound
        assert [m.name for m in compound.models] == ["Earth", "srtm", "dem"]

    def test_replaces_same_named_model(self):
        scene = _scene()
        add_to_scene(scene, _document("ElevationModel", "dem"), {})
        add_to_scene(scene, _document("ElevationModel", "dem"), {})
        assert [m.name for m in scene.elevation.models] == ["Earth", "dem"]

    def test_listeners_notified(self):
        listener = MagicMock()
        scene = _scene(elevation_listeners=[listener])

        model = add_to_scene(scene, _document("ElevationModel", "dem"), {})

        listener.assert_called_with(model)

    def test_go_to_sector(self):
        go_to = MagicMock()
        add_to_scene(_scene(go_to=go_to), _document("ElevationModel", "dem"), {})
        go_to.assert_called_once_with(SECTOR)

    def test_find_elevation_model(self):
        scene = _scene(elevation=SingleElevationModel(ElevationModel("Earth")))
        assert find_elevation_model(scene, "Earth").name == "Earth"
        assert find_elevation_model(scene, "dem") is None

    def test_nameless_document_aborts(self):
        scene = _scene()
        root = ET.Element("ElevationModel")
        assert add_to_scene(scene, root, {}) is None
        assert isinstance(scene.elevation, SingleElevationModel)
