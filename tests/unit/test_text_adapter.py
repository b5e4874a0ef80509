"""Tests for the free-text feedback classifier."""

import pytest

from src.core.exceptions import ErrorReason, EvaluationError
from src.core.models import (
    HandShape,
    ImprovementAspect,
    ImprovementPriority,
    MediaReference,
    MovementPattern,
    SignContext,
)
from src.services.evaluation.prompts import TEXT_SYSTEM_PROMPT
from src.services.evaluation.text_adapter import TextVerdictAdapter, classify_feedback

FEEDBACK = """**Strong Points:**
✓ Your hand starts at the correct location near the forehead.
✓ Good flat hand shape with fingers together.

**Areas for Improvement:**
• Palm orientation: Your palm faces inward. Rotate it so it faces outward.
• Movement: The motion is too short. Extend the salute away from your head.

**Overall Accuracy: 78%**
Keep practicing, you're doing great!
"""


class TestClassifyFeedback:
    def test_structured_feedback(self):
        verdict = classify_feedback(FEEDBACK)

        assert verdict.accuracy_score == 78
        assert verdict.hand_shape_detected == HandShape.flat
        assert verdict.movement_pattern_detected == MovementPattern.other
        assert len(verdict.strengths) == 2
        assert verdict.strengths[0].startswith("Your hand starts")
        assert verdict.encouragement == "Keep practicing, you're doing great!"

    def test_improvements_are_ranked(self):
        verdict = classify_feedback(FEEDBACK)

        first, second = verdict.improvements
        assert first.aspect == ImprovementAspect.orientation
        assert first.issue == "Your palm faces inward."
        assert first.suggestion == "Rotate it so it faces outward."
        assert first.priority == ImprovementPriority.critical
        assert second.aspect == ImprovementAspect.movement
        assert second.priority == ImprovementPriority.important
        assert verdict.critical_feedback.startswith("Palm orientation")

    @pytest.mark.parametrize(
        ("text", "score"),
        [
            ("Accuracy score: 92/100", 92),
            ("accuracy - 55%", 55),
            ("Overall accuracy: 64.5 %", 64.5),
        ],
    )
    def test_score_formats(self, text, score):
        assert classify_feedback(text).accuracy_score == score

    def test_praise_without_score(self):
        verdict = classify_feedback("Great job! Your sign is correct and accurate.")

        assert verdict.accuracy_score == 80

    def test_correction_without_score(self):
        verdict = classify_feedback("Not quite right. Let's try again!")

        assert verdict.accuracy_score == 30

    def test_incorrect_is_not_praise(self):
        verdict = classify_feedback("Your hand shape is incorrect.")

        assert verdict.accuracy_score == 40

    def test_and_hand_is_case_sensitive(self):
        upper = classify_feedback("Use the AND hand here. Accuracy: 50%")
        lower = classify_feedback("Your hand and shape look fine. Accuracy: 50%")

        assert upper.hand_shape_detected == HandShape.and_hand
        assert lower.hand_shape_detected == HandShape.other

    def test_earliest_movement_wins(self):
        verdict = classify_feedback("A circular motion, then waves. Accuracy: 60%")

        assert verdict.movement_pattern_detected == MovementPattern.circular

    @pytest.mark.parametrize("text", ["", "   ", "The video shows a person."])
    def test_unclassifiable(self, text):
        with pytest.raises(EvaluationError) as exc_info:
            classify_feedback(text)

        assert exc_info.value.reason == ErrorReason.malformed_response


class TestTextVerdictAdapter:
    async def test_requests_prose_and_classifies(self, mock_llm):
        mock_llm.generate.return_value = FEEDBACK
        adapter = TextVerdictAdapter(mock_llm)
        reference = MediaReference(url="http://localhost:8000/media/a.webm", id="a")
        context = SignContext(sign_to_perform="HELLO", instructions="Salute outward.")

        verdict = await adapter.evaluate(reference, context)

        assert verdict.accuracy_score == 78
        assert mock_llm.generate.await_args.kwargs["system"] == TEXT_SYSTEM_PROMPT

    async def test_timeout(self, mock_llm):
        mock_llm.generate.side_effect = TimeoutError("slow")
        adapter = TextVerdictAdapter(mock_llm)
        reference = MediaReference(url="http://localhost:8000/media/a.webm", id="a")
        context = SignContext(sign_to_perform="HELLO", instructions="Salute outward.")

        with pytest.raises(EvaluationError) as exc_info:
            await adapter.evaluate(reference, context)

        assert exc_info.value.reason == ErrorReason.timeout
