import logging
import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ciao.api import account, assignments, auth, boards, columns, cron, projects, tasks
from ciao.config import CORS_ORIGINS, LOG_LEVEL
from ciao.database import create_db_and_tables
from ciao.errors import CiaoError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Ciao API")

# CORS - set CORS_ORIGINS in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
def _startup():
    create_db_and_tables()

@app.exception_handler(CiaoError)
async def _ciao_error(request: Request, exc: CiaoError):
    return JSONResponse({"detail": exc.message}, status_code=exc.status_code)

@app.exception_handler(RequestValidationError)
async def _invalid_body(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg", "Invalid request"))
    return JSONResponse({"detail": "; ".join(problems) or "Invalid request"}, status_code=400)

@app.exception_handler(SQLAlchemyError)
async def _database_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"detail": "Internal server error"}, status_code=500)

@app.get("/health")
def health():
    return {"ok": True}

# Routers
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(account.router, prefix="/account", tags=["account"])
app.include_router(boards.router, prefix="/boards", tags=["boards"])
app.include_router(columns.router, prefix="/columns", tags=["columns"])
app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
app.include_router(assignments.router, prefix="/assignments", tags=["assignments"])
app.include_router(projects.router, prefix="/projects", tags=["projects"])
app.include_router(cron.router, prefix="/cron", tags=["cron"])
