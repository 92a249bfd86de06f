import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from eventdesk.config import settings
from eventdesk.database import init_db
from eventdesk.errors import ServiceError
from eventdesk.routers import auth, events, forms, submissions

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield

app = FastAPI(title="Event Desk API", lifespan=lifespan)

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return JSONResponse({"error": "Invalid request"}, status_code=400)
    first = errors[0]
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid value")
    return JSONResponse({"error": f"{location}: {message}" if location else message}, status_code=400)

app.include_router(auth.router)
app.include_router(events.router)
app.include_router(forms.router)
app.include_router(submissions.router)

@app.get("/")
async def read_root():
    return {"message": "Event Desk API is running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app='main:app', host="0.0.0.0", port=8000, reload=True)
