"""
Card navigation.

The canonical state is a position in ``SLIDE_ORDER``. The three-way
front/inner/back view is a projection of it: positions 1 and 2 are both
``inner`` and the open spread shows the two inner faces together.

The card is two leaves. Leaf A prints ``front`` outside and ``left_inner``
inside; leaf B prints ``right_inner`` and ``back``. ``pose`` gives the
transform for the current view; the state itself changes at once and the
flip animation is purely a rendering concern.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple

from .. import config
from ..errors import InvalidTransition
from .document import SLIDE_ORDER

logger = logging.getLogger(__name__)


class View(str, Enum):
    FRONT = "front"
    INNER = "inner"
    BACK = "back"


TRANSITIONS: Dict[View, Tuple[View, ...]] = {
    View.FRONT: (View.INNER,),
    View.INNER: (View.FRONT, View.BACK),
    View.BACK: (View.INNER,),
}

LAST_INDEX = len(SLIDE_ORDER) - 1


def view_for_index(index: int) -> View:
    if index == 0:
        return View.FRONT
    if index == LAST_INDEX:
        return View.BACK
    return View.INNER


@dataclass(frozen=True)
class CardPose:
    translate_x: float
    card_rotate_y: float
    leaf_a_rotate_y: float
    leaf_a_z: int
    leaf_b_z: int
    duration_ms: int = config.FLIP_DURATION_MS


def pose_for(view: View) -> CardPose:
    is_inner = view == View.INNER
    is_back = view == View.BACK
    # Leaf z-order depends on the back view alone.
    return CardPose(
        translate_x=0.5 if is_inner else 0.0,
        card_rotate_y=-180.0 if is_back else 0.0,
        leaf_a_rotate_y=-180.0 if is_inner else 0.0,
        leaf_a_z=0 if is_back else 20,
        leaf_b_z=20 if is_back else 10,
    )


class CardNavigator:
    def __init__(self, index: int = 0) -> None:
        if not 0 <= index <= LAST_INDEX:
            raise ValueError(f"Slide index out of range: {index}")
        self.index = index
        self._listeners: List[Callable[[int], None]] = []

    @property
    def view(self) -> View:
        return view_for_index(self.index)

    @property
    def current_slide(self) -> str:
        return SLIDE_ORDER[self.index]

    @property
    def visible_slides(self) -> Tuple[str, ...]:
        if self.view == View.INNER:
            return ("left_inner", "right_inner")
        return (self.current_slide,)

    def subscribe(self, listener: Callable[[int], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def can_go(self, target: View) -> bool:
        return target in TRANSITIONS[self.view]

    def go(self, target: View) -> View:
        target = View(target)
        current = self.view
        if target == current:
            return current
        if not self.can_go(target):
            raise InvalidTransition(current.value, target.value)
        if target == View.FRONT:
            self._set(0)
        elif target == View.BACK:
            self._set(LAST_INDEX)
        else:
            # Opening from the front lands on the left inner face, turning
            # back from the back cover lands on the right one.
            self._set(1 if current == View.FRONT else 2)
        return self.view

    def open(self) -> View:
        return self.go(View.INNER)

    def close(self) -> View:
        return self.go(View.FRONT)

    def turn_to_back(self) -> View:
        return self.go(View.BACK)

    def next(self) -> int:
        return self._set(min(self.index + 1, LAST_INDEX))

    def prev(self) -> int:
        return self._set(max(self.index - 1, 0))

    def change_page(self, direction: str) -> int:
        if direction == "next":
            return self.next()
        if direction == "prev":
            return self.prev()
        raise ValueError(f"Unknown direction: {direction}")

    def pose(self) -> CardPose:
        return pose_for(self.view)

    def _set(self, index: int) -> int:
        if index != self.index:
            logger.debug("Navigate %s -> %s", SLIDE_ORDER[self.index], SLIDE_ORDER[index])
            self.index = index
            for listener in list(self._listeners):
                listener(index)
        return self.index
