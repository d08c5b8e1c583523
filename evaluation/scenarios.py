"""Evaluation scenarios built from the campus sample reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass
class EvaluationScenario:
    name: str
    description: str
    items: List[Dict[str, object]]
    # (lost title, found title) -> scripted semantic similarity of their descriptions
    text_similarity: Dict[Tuple[str, str], float] = field(default_factory=dict)
    resolve_matches: bool = False
    expectations: Dict[str, object] = field(default_factory=dict)


LOST_WATCH: Dict[str, object] = {
    "type": "lost",
    "title": "Red Apple Watch Series 8",
    "description": (
        "Lost my red Apple Watch Series 8 with red sport band. Has a small scratch on the back. "
        "Lost near the library on January 15th."
    ),
    "image_ref": "samples/lost-red-watch.jpg",
    "created_by": "user1",
    "labels": [
        {"description": "Watch", "confidence": 0.97},
        {"description": "Wearable device", "confidence": 0.91},
        {"description": "Electronic device", "confidence": 0.88},
    ],
    "objects": [{"name": "Watch", "confidence": 0.92}],
    "colors": [
        {"red": 200, "green": 20, "blue": 20, "pixelFraction": 0.7},
        {"red": 50, "green": 50, "blue": 50, "pixelFraction": 0.2},
    ],
    "text": "",
    "normalized_description": "Red Apple Watch Series 8 with sport band, small scratch on back",
    "category": "electronics",
    "features": ["Apple", "Watch", "Series 8", "Red", "Sport Band"],
    "color_names": ["red"],
}

FOUND_WATCH: Dict[str, object] = {
    "type": "found",
    "title": "Red Smartwatch Found",
    "description": (
        "Found a red smartwatch in the library. Appears to be an Apple device with a red band. "
        "Minor scratches on the back. Found on January 15th near the circulation desk."
    ),
    "image_ref": "samples/found-red-smartwatch.jpg",
    "created_by": "user2",
    "labels": [
        {"description": "Watch", "confidence": 0.95},
        {"description": "Smartwatch", "confidence": 0.89},
        {"description": "Wearable", "confidence": 0.87},
    ],
    "objects": [{"name": "Watch", "confidence": 0.90}],
    "colors": [
        {"red": 210, "green": 15, "blue": 25, "pixelFraction": 0.75},
        {"red": 40, "green": 40, "blue": 40, "pixelFraction": 0.15},
    ],
    "text": "Apple",
    "normalized_description": "Red Apple smartwatch, minor scratches, found in library",
    "category": "electronics",
    "features": ["Apple", "Smartwatch", "Red", "Band", "Found"],
    "color_names": ["red"],
}

LOST_BACKPACK: Dict[str, object] = {
    "type": "lost",
    "title": "Black College Backpack",
    "description": (
        "Lost a black North Face backpack with laptop compartment. Contains MacBook sticker on front. "
        "Lost at the student center on January 14th."
    ),
    "image_ref": "samples/lost-black-backpack.jpg",
    "created_by": "user1",
    "labels": [
        {"description": "Backpack", "confidence": 0.96},
        {"description": "Bag", "confidence": 0.93},
        {"description": "Black", "confidence": 0.91},
    ],
    "objects": [{"name": "Backpack", "confidence": 0.94}],
    "colors": [
        {"red": 20, "green": 20, "blue": 20, "pixelFraction": 0.85},
        {"red": 100, "green": 100, "blue": 100, "pixelFraction": 0.1},
    ],
    "text": "North Face",
    "normalized_description": "Black North Face backpack with MacBook sticker",
    "category": "accessories",
    "features": ["Black", "North Face", "Backpack", "Laptop"],
    "color_names": ["black"],
}

FOUND_BACKPACK: Dict[str, object] = {
    "type": "found",
    "title": "Black Backpack Found at Student Center",
    "description": (
        "Found a black backpack at the student center lost and found. Has a MacBook sticker on it. "
        "North Face brand. Appears to be in good condition."
    ),
    "image_ref": "samples/found-black-backpack.jpg",
    "created_by": "user3",
    "labels": [
        {"description": "Backpack", "confidence": 0.94},
        {"description": "Luggage", "confidence": 0.88},
        {"description": "Black", "confidence": 0.90},
    ],
    "objects": [{"name": "Backpack", "confidence": 0.92}],
    "colors": [
        {"red": 30, "green": 30, "blue": 30, "pixelFraction": 0.80},
        {"red": 110, "green": 110, "blue": 110, "pixelFraction": 0.15},
    ],
    "text": "North Face",
    "normalized_description": "Black North Face backpack with stickers, found at student center",
    "category": "accessories",
    "features": ["Black", "Backpack", "North Face", "Found"],
    "color_names": ["black"],
}

LOST_EARBUDS: Dict[str, object] = {
    "type": "lost",
    "title": "Blue Airpods Pro Case",
    "description": (
        "Lost my blue Airpods Pro case with earbuds. Very distinctive bright blue color. "
        "Lost somewhere in the engineering building on January 15th morning."
    ),
    "image_ref": "samples/lost-blue-airpods.jpg",
    "created_by": "user2",
    "labels": [
        {"description": "Earbuds", "confidence": 0.92},
        {"description": "Electronics", "confidence": 0.89},
        {"description": "Audio device", "confidence": 0.86},
    ],
    "objects": [{"name": "Airpods", "confidence": 0.88}],
    "colors": [
        {"red": 50, "green": 150, "blue": 200, "pixelFraction": 0.70},
        {"red": 255, "green": 255, "blue": 255, "pixelFraction": 0.25},
    ],
    "text": "Airpods Pro",
    "normalized_description": "Blue Airpods Pro case with earbuds",
    "category": "electronics",
    "features": ["Blue", "Airpods", "Pro", "Case"],
    "color_names": ["blue"],
}

FOUND_EARBUDS: Dict[str, object] = {
    "type": "found",
    "title": "Blue Earbuds Case Found",
    "description": (
        "Found a blue case with earbuds inside in the engineering building hallway. Says 'Airpods Pro' on it. "
        "Bright blue color, looks brand new."
    ),
    "image_ref": "samples/found-blue-earbuds.jpg",
    "created_by": "user3",
    "labels": [
        {"description": "Earbuds", "confidence": 0.90},
        {"description": "Audio", "confidence": 0.87},
        {"description": "Wireless", "confidence": 0.84},
    ],
    "objects": [{"name": "Earbuds case", "confidence": 0.89}],
    "colors": [
        {"red": 60, "green": 160, "blue": 210, "pixelFraction": 0.72},
        {"red": 245, "green": 245, "blue": 245, "pixelFraction": 0.23},
    ],
    "text": "Airpods",
    "normalized_description": "Blue Airpods case with earbuds, found in engineering building",
    "category": "electronics",
    "features": ["Blue", "Earbuds", "Case", "Airpods"],
    "color_names": ["blue"],
}

LOST_JACKET: Dict[str, object] = {
    "type": "lost",
    "title": "Red Jacket",
    "description": "Lost a bright red winter jacket at the gym. Very warm, puffy material. North Face brand.",
    "image_ref": "samples/lost-red-jacket.jpg",
    "created_by": "user1",
    "labels": [
        {"description": "Jacket", "confidence": 0.94},
        {"description": "Clothing", "confidence": 0.91},
        {"description": "Red", "confidence": 0.89},
    ],
    "objects": [{"name": "Jacket", "confidence": 0.91}],
    "colors": [{"red": 220, "green": 20, "blue": 20, "pixelFraction": 0.80}],
    "text": "North Face",
    "normalized_description": "Red North Face winter jacket, puffy",
    "category": "clothing",
    "features": ["Red", "Jacket", "Winter", "Puffy"],
    "color_names": ["red"],
}

SECOND_FOUND_WATCH: Dict[str, object] = {
    **FOUND_WATCH,
    "title": "Red Watch Turned In",
    "description": "Red Apple watch with a sport band turned in at the library desk. Scratch on the back.",
    "image_ref": "samples/found-red-watch-2.jpg",
    "created_by": "user3",
}


SAMPLE_TEXT_SIMILARITY: Dict[Tuple[str, str], float] = {
    (LOST_WATCH["title"], FOUND_WATCH["title"]): 0.82,
    (LOST_BACKPACK["title"], FOUND_BACKPACK["title"]): 0.85,
    (LOST_EARBUDS["title"], FOUND_EARBUDS["title"]): 0.78,
    (LOST_WATCH["title"], SECOND_FOUND_WATCH["title"]): 0.8,
}


SCENARIOS: List[EvaluationScenario] = [
    EvaluationScenario(
        name="sample_pairs",
        description="Three true pairs and one unrelated jacket submitted one after another.",
        items=[LOST_WATCH, FOUND_WATCH, LOST_BACKPACK, FOUND_BACKPACK, LOST_EARBUDS, FOUND_EARBUDS, LOST_JACKET],
        text_similarity=SAMPLE_TEXT_SIMILARITY,
        expectations={
            "expected_pairs": [
                (LOST_WATCH["title"], FOUND_WATCH["title"]),
                (LOST_BACKPACK["title"], FOUND_BACKPACK["title"]),
                (LOST_EARBUDS["title"], FOUND_EARBUDS["title"]),
            ],
            "min_confidence": 0.7,
        },
    ),
    EvaluationScenario(
        name="no_match",
        description="A red jacket against a found watch of a different category.",
        items=[LOST_JACKET, FOUND_WATCH],
        text_similarity=SAMPLE_TEXT_SIMILARITY,
        expectations={"expected_pairs": []},
    ),
    EvaluationScenario(
        name="found_before_lost",
        description="The found backpack is reported before its owner reports the loss.",
        items=[FOUND_BACKPACK, LOST_BACKPACK],
        text_similarity=SAMPLE_TEXT_SIMILARITY,
        expectations={
            "expected_pairs": [(LOST_BACKPACK["title"], FOUND_BACKPACK["title"])],
            "min_confidence": 0.7,
        },
    ),
    EvaluationScenario(
        name="resolved_items_leave_pool",
        description="Once the watch pair is confirmed, a second found watch is not matched to it.",
        items=[LOST_WATCH, FOUND_WATCH, SECOND_FOUND_WATCH],
        text_similarity=SAMPLE_TEXT_SIMILARITY,
        resolve_matches=True,
        expectations={"expected_pairs": [(LOST_WATCH["title"], FOUND_WATCH["title"])]},
    ),
]


__all__ = ["EvaluationScenario", "SCENARIOS", "SAMPLE_TEXT_SIMILARITY"]
