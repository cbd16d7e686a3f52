"""Multiple-choice question construction."""

import random
from collections.abc import Iterable, Sequence
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from alphabet_trainer.engine.practice import select_next_item
from alphabet_trainer.models.progress import UserProgress


class QuestionType(StrEnum):
    TAP_WHAT_YOU_HEAR = "tap_what_you_hear"
    WHICH_SOUND = "which_sound"


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    type: QuestionType
    target_item: str
    choices: tuple[str, ...]


def question_type_for(index: int) -> QuestionType:
    """Alternate the two question types."""
    return QuestionType.TAP_WHAT_YOU_HEAR if index % 2 == 0 else QuestionType.WHICH_SOUND


def build_question(
    progress: UserProgress,
    item_ids: Sequence[str],
    question_index: int,
    rng: random.Random,
    exclude_ids: Iterable[str] = (),
    choice_count: int = 4,
) -> Question | None:
    """Select a target item and surround it with shuffled distractors.

    Returns None when the selector has no candidate for this question.
    """
    target = select_next_item(
        progress, question_index, exclude_ids, rng=rng, item_ids=item_ids
    )
    if target is None:
        return None

    others = [i for i in item_ids if i != target]
    distractors = rng.sample(others, min(choice_count - 1, len(others)))
    choices = [target, *distractors]
    rng.shuffle(choices)

    return Question(
        index=question_index,
        type=question_type_for(question_index),
        target_item=target,
        choices=tuple(choices),
    )
