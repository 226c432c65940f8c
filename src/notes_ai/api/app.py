import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from notes_ai.api.schemas import GenerateRequest, GenerateResponse
from notes_ai.service.generator import GenerateService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

service = GenerateService()


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    await service.aclose()


app = FastAPI(title="notes-ai", version="0.1.0", lifespan=lifespan)


@app.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok"}


@app.post("/generate", response_model=GenerateResponse)
async def generate(req: GenerateRequest):
    result = await service.generate(req.to_generation_request())
    if "error" not in result:
        return GenerateResponse(**result)
    headers = {}
    if "retry_after" in result:
        headers["Retry-After"] = str(result["retry_after"])
    return JSONResponse(
        status_code=result["status_code"],
        content={"error": result["error"]},
        headers=headers,
    )
