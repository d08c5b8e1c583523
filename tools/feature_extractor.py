"""Image feature extraction capability and its Cloud Vision implementation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping

import requests
from google.cloud import vision

from models.errors import FeatureExtractionError
from models.item import DetectedObject, DominantColor, ImageFeatureSet, Label
from models.match import clamp01
from tools.observability import instrument_collaborator


LOGGER = logging.getLogger(__name__)

MAX_LABELS = 10
MAX_OBJECTS = 10
MAX_COLORS = 3


class FeatureExtractor(ABC):
    """Abstract feature extraction interface."""

    @abstractmethod
    def extract_features(self, image_ref: str) -> ImageFeatureSet:
        """Return labels, objects, dominant colors and text for an image.

        Raises :class:`FeatureExtractionError` when the image cannot be analysed.
        """


class VisionFeatureExtractor(FeatureExtractor):
    """Google Cloud Vision extractor.

    ``gs://`` references are handed to Vision by URI, ``http(s)`` references are
    downloaded first (Vision refuses many public hosts) and anything else is read
    from the local filesystem.
    """

    def __init__(self, client: Any | None = None, timeout_seconds: float = 30.0) -> None:
        self._client = client
        self.timeout_seconds = timeout_seconds

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = vision.ImageAnnotatorClient()
            LOGGER.info("Google Cloud Vision client initialized")
        return self._client

    def _image(self, image_ref: str) -> vision.Image:
        if image_ref.startswith("gs://"):
            return vision.Image(source=vision.ImageSource(image_uri=image_ref))
        if image_ref.lower().startswith(("http://", "https://")):
            response = requests.get(image_ref, timeout=self.timeout_seconds)
            response.raise_for_status()
            return vision.Image(content=response.content)
        return vision.Image(content=Path(image_ref).read_bytes())

    def _request(self, image: vision.Image) -> vision.AnnotateImageRequest:
        features = [
            vision.Feature(type_=vision.Feature.Type.LABEL_DETECTION, max_results=MAX_LABELS),
            vision.Feature(type_=vision.Feature.Type.OBJECT_LOCALIZATION, max_results=MAX_OBJECTS),
            vision.Feature(type_=vision.Feature.Type.IMAGE_PROPERTIES),
            vision.Feature(type_=vision.Feature.Type.TEXT_DETECTION),
        ]
        return vision.AnnotateImageRequest(image=image, features=features)

    @instrument_collaborator("feature_extractor")
    def extract_features(self, image_ref: str) -> ImageFeatureSet:
        if not image_ref:
            raise FeatureExtractionError("image_ref is required for feature extraction")

        try:
            image = self._image(image_ref)
            response = self.client.annotate_image(self._request(image), timeout=self.timeout_seconds)
        except (requests.RequestException, OSError) as exc:
            raise FeatureExtractionError(f"Could not load image: {exc}", cause=exc) from exc
        except Exception as exc:  # noqa: BLE001
            raise FeatureExtractionError(f"Vision request failed: {exc}", cause=exc) from exc

        error = getattr(response, "error", None)
        if error is not None and getattr(error, "message", ""):
            raise FeatureExtractionError(f"Google Cloud Vision error: {error.message}")
        return vision_response_to_features(response)


def vision_response_to_features(response: Any) -> ImageFeatureSet:
    """Convert an ``AnnotateImageResponse`` into an :class:`ImageFeatureSet`."""

    labels = [
        Label(description=annotation.description, confidence=clamp01(annotation.score))
        for annotation in list(response.label_annotations)[:MAX_LABELS]
    ]
    objects = [
        DetectedObject(name=annotation.name, confidence=clamp01(annotation.score))
        for annotation in list(response.localized_object_annotations)[:MAX_OBJECTS]
    ]

    colors: List[DominantColor] = []
    properties = getattr(response, "image_properties_annotation", None)
    dominant = getattr(getattr(properties, "dominant_colors", None), "colors", None) or []
    for info in dominant:
        colors.append(
            DominantColor(
                red=min(255, max(0, int(round(info.color.red or 0)))),
                green=min(255, max(0, int(round(info.color.green or 0)))),
                blue=min(255, max(0, int(round(info.color.blue or 0)))),
                pixel_fraction=clamp01(info.pixel_fraction),
            )
        )
    colors.sort(key=lambda color: color.pixel_fraction, reverse=True)

    texts = list(response.text_annotations)
    text = texts[0].description if texts else ""
    return ImageFeatureSet(labels=tuple(labels), objects=tuple(objects), colors=tuple(colors[:MAX_COLORS]), text=text)


class StaticFeatureExtractor(FeatureExtractor):
    """Offline extractor serving pre-computed feature sets keyed by image reference."""

    def __init__(self, features: Mapping[str, ImageFeatureSet] | None = None) -> None:
        self.features: Dict[str, ImageFeatureSet] = dict(features or {})
        self.calls: List[str] = []

    @instrument_collaborator("feature_extractor")
    def extract_features(self, image_ref: str) -> ImageFeatureSet:
        self.calls.append(image_ref)
        try:
            return self.features[image_ref]
        except KeyError as exc:
            raise FeatureExtractionError(f"No features registered for image {image_ref!r}") from exc


__all__ = [
    "FeatureExtractor",
    "VisionFeatureExtractor",
    "StaticFeatureExtractor",
    "vision_response_to_features",
]
