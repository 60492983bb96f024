"""Advice routes - suggestion, grading and intent endpoints."""

from fastapi import APIRouter

from apps.advice.handlers import (
    analyze_intent,
    generate_from_direction,
    get_suggestion,
    grade_response,
)

router = APIRouter(tags=["Generation"])

# POST /suggestion - Advice about the conversation
router.post("/suggestion")(get_suggestion)

# POST /grade-response - Score a candidate reply
router.post("/grade-response")(grade_response)

# POST /analyze-intent - Intent, emotion and reply directions
router.post("/analyze-intent")(analyze_intent)

# POST /generate-from-direction - Reply following a chosen direction
router.post("/generate-from-direction")(generate_from_direction)
