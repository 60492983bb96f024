"""Generation routes - registers reply endpoints."""

from fastapi import APIRouter

from apps.generation.handlers import generate_response, stream_response

router = APIRouter(tags=["Generation"])

# POST /generate-response - Single reply
router.post("/generate-response")(generate_response)

# POST /generate-response-stream - Reply as server-sent events
router.post("/generate-response-stream")(stream_response)
