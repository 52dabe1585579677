# ============================================================================
# SCENE BINDER
# ============================================================================
# STATUS: Service - Attach installed datasets to a display scene
# PURPOSE: Turn a finished configuration document into a layer or elevation
#          model and put it in the scene, replacing stand-ins
# CREATED: 18 OCT 2026
# ============================================================================
"""
Scene Binder

The display runtime is external. Scene is the minimal model of what the
binder touches: an ordered layer list, the globe's elevation model and a
view that can be steered to a sector.

Layer path:
    factory → sector → enable → replace same-named layer → drop preview
    surface image → insert before "Place Names" → go to sector

Elevation path:
    factory → remove same-named model → merge into the scene's elevation
    (a single model is wrapped into a compound one) → go to sector →
    notify elevation listeners

Factory failures are logged with traceback and the bind is abandoned.
They never propagate: a dataset that cannot be displayed is still
installed.

Usage:
    scene = Scene(elevation=SingleElevationModel(ElevationModel("Earth")))
    add_to_scene(scene, document, {ParamKey.DISPLAY_NAME: "ortho"})
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union
from xml.etree.ElementTree import Element

from core.contracts import ConfigType, ParamKey, PREVIEW_LAYER
from core.documents import get_config_type, get_display_name, read_sector
from core.logging import ComponentType, get_logger
from core.models import Sector

logger = get_logger(__name__, ComponentType.BINDER)

PLACE_NAMES_LAYER = "Place Names"
SURFACE_IMAGE = "surface_image"


# ============================================================================
# SCENE MODEL
# ============================================================================

@dataclass
class Renderable:
    """Something drawn by a renderable layer (preview images, shapes)."""
    kind: str
    source: Any = None


@dataclass
class Layer:
    name: str
    sector: Optional[Sector] = None
    enabled: bool = False
    values: Dict[Any, Any] = field(default_factory=dict)
    renderables: List[Renderable] = field(default_factory=list)

    @property
    def is_preview(self) -> bool:
        return bool(self.values.get(PREVIEW_LAYER))

    def remove_renderable(self, renderable: Renderable) -> None:
        self.renderables.remove(renderable)


@dataclass
class ElevationModel:
    name: str
    sector: Optional[Sector] = None
    values: Dict[Any, Any] = field(default_factory=dict)


@dataclass
class SingleElevationModel:
    """The globe has one elevation model."""
    model: ElevationModel

    @property
    def models(self) -> List[ElevationModel]:
        return [self.model]

    def merge(self, model: ElevationModel) -> "CompoundElevationModel":
        """Wrap the current model and the new one into a compound."""
        return CompoundElevationModel(models=[self.model, model])

    def remove(self, model: ElevationModel) -> "SceneElevation":
        # A single model is never removed; there would be no terrain left
        return self


@dataclass
class CompoundElevationModel:
    """The globe combines several elevation models."""
    models: List[ElevationModel] = field(default_factory=list)

    def contains(self, model: ElevationModel) -> bool:
        return any(m is model for m in self.models)

    def merge(self, model: ElevationModel) -> "CompoundElevationModel":
        if not self.contains(model):
            self.models.append(model)
        return self

    def remove(self, model: ElevationModel) -> "CompoundElevationModel":
        self.models = [m for m in self.models if m.name != model.name]
        return self


SceneElevation = Union[SingleElevationModel, CompoundElevationModel]
ElevationListener = Callable[[ElevationModel], None]


@dataclass
class Scene:
    """Layers, terrain and view of a display."""
    layers: List[Layer] = field(default_factory=list)
    elevation: SceneElevation = field(
        default_factory=lambda: SingleElevationModel(ElevationModel("Earth"))
    )
    go_to: Optional[Callable[[Sector], None]] = None
    elevation_listeners: List[ElevationListener] = field(default_factory=list)

    def insert_before_place_names(self, layer: Layer) -> None:
        for index, existing in enumerate(self.layers):
            if existing.name == PLACE_NAMES_LAYER:
                self.layers.insert(index, layer)
                return
        self.layers.append(layer)

    def steer_to(self, sector: Optional[Sector]) -> None:
        if self.go_to is None or sector is None or sector.is_full_sphere:
            return
        self.go_to(sector)

    def fire_elevation_changed(self, model: ElevationModel) -> None:
        for listener in list(self.elevation_listeners):
            try:
                listener(model)
            except Exception as e:
                logger.warning(f"Elevation listener failed: {e}")


# ============================================================================
# FACTORIES
# ============================================================================

class LayerFactory(ABC):
    @abstractmethod
    def create_from_config(self, element: Element) -> Layer:
        """Build a layer from a configuration document."""


class ElevationModelFactory(ABC):
    @abstractmethod
    def create_from_config(self, element: Element) -> ElevationModel:
        """Build an elevation model from a configuration document."""


class ConfigLayerFactory(LayerFactory):
    """Layer named and bounded by the document itself."""

    def create_from_config(self, element: Element) -> Layer:
        name = get_display_name(element)
        if not name:
            raise ValueError("Layer document has no DisplayName or DatasetName")
        return Layer(name=name, sector=read_sector(element, "Sector"))


class ConfigElevationModelFactory(ElevationModelFactory):
    """Elevation model named and bounded by the document itself."""

    def create_from_config(self, element: Element) -> ElevationModel:
        name = get_display_name(element)
        if not name:
            raise ValueError("ElevationModel document has no DisplayName or DatasetName")
        return ElevationModel(name=name, sector=read_sector(element, "Sector"))


# ============================================================================
# LOOKUP
# ============================================================================

def find_layer(scene: Scene, name: Optional[str]) -> Optional[Layer]:
    for layer in scene.layers:
        if layer.name is not None and layer.name == name:
            return layer
    return None


def find_elevation_model(scene: Scene, name: Optional[str]) -> Optional[ElevationModel]:
    for model in scene.elevation.models:
        if model.name is not None and model.name == name:
            return model
    return None


def remove_elevation_model(scene: Scene, model: ElevationModel) -> None:
    """Remove a model from a compound elevation; single models stay."""
    if isinstance(scene.elevation, CompoundElevationModel):
        scene.elevation = scene.elevation.remove(model)
        scene.fire_elevation_changed(model)


# ============================================================================
# BINDING
# ============================================================================

def _remove_layer_preview(scene: Scene, data_set: Dict[Any, Any]) -> None:
    layer = data_set.get(ParamKey.LAYER)
    if not isinstance(layer, Layer) or not layer.is_preview:
        return
    for renderable in layer.renderables:
        if renderable.kind == SURFACE_IMAGE:
            layer.remove_renderable(renderable)
            return


def add_layer_to_scene(
    scene: Scene,
    element: Element,
    data_set: Dict[Any, Any],
    go_to: bool = True,
    factory: Optional[LayerFactory] = None,
) -> Optional[Layer]:
    factory = factory or ConfigLayerFactory()
    try:
        layer = factory.create_from_config(element)
        layer.sector = read_sector(element, "Sector")
        data_set[ParamKey.DISPLAY_NAME] = layer.name
    except Exception:
        logger.error(
            f"Creation from configuration failed: {get_display_name(element)}",
            exc_info=True,
        )
        return None

    layer.enabled = True

    existing = find_layer(scene, data_set.get(ParamKey.DISPLAY_NAME))
    if existing is not None:
        scene.layers.remove(existing)

    _remove_layer_preview(scene, data_set)
    scene.insert_before_place_names(layer)

    if go_to:
        scene.steer_to(layer.sector)

    logger.info(f"Added layer to scene: {layer.name}")
    return layer


def add_elevation_model_to_scene(
    scene: Scene,
    element: Element,
    data_set: Dict[Any, Any],
    go_to: bool = True,
    factory: Optional[ElevationModelFactory] = None,
) -> Optional[ElevationModel]:
    factory = factory or ConfigElevationModelFactory()
    try:
        model = factory.create_from_config(element)
        data_set[ParamKey.DISPLAY_NAME] = model.name
    except Exception:
        logger.error(
            f"Creation from configuration failed: {get_display_name(element)}",
            exc_info=True,
        )
        return None

    existing = find_elevation_model(scene, data_set.get(ParamKey.DISPLAY_NAME))
    if existing is not None:
        remove_elevation_model(scene, existing)

    scene.elevation = scene.elevation.merge(model)

    if go_to:
        scene.steer_to(model.sector)

    scene.fire_elevation_changed(model)
    logger.info(f"Added elevation model to scene: {model.name}")
    return model


def add_to_scene(
    scene: Scene,
    element: Element,
    data_set: Dict[Any, Any],
    go_to: bool = True,
    layer_factory: Optional[LayerFactory] = None,
    elevation_factory: Optional[ElevationModelFactory] = None,
) -> Optional[Union[Layer, ElevationModel]]:
    """
    Bind a configuration document to the scene by its root type.

    Returns:
        The added layer or elevation model, or None if nothing was added
    """
    config_type = get_config_type(element)
    if config_type == ConfigType.LAYER:
        return add_layer_to_scene(scene, element, data_set, go_to, layer_factory)
    if config_type == ConfigType.ELEVATION_MODEL:
        return add_elevation_model_to_scene(scene, element, data_set, go_to, elevation_factory)
    logger.debug(f"Not a bindable document: <{element.tag if element is not None else None}>")
    return None


__all__ = [
    "Scene",
    "Layer",
    "Renderable",
    "ElevationModel",
    "SingleElevationModel",
    "CompoundElevationModel",
    "SceneElevation",
    "LayerFactory",
    "ElevationModelFactory",
    "ConfigLayerFactory",
    "ConfigElevationModelFactory",
    "add_to_scene",
    "add_layer_to_scene",
    "add_elevation_model_to_scene",
    "find_layer",
    "find_elevation_model",
    "remove_elevation_model",
    "PLACE_NAMES_LAYER",
    "SURFACE_IMAGE",
]
