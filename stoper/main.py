import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlmodel import Session

from stoper import db
from stoper.config import get_settings
from stoper.constants import REASONS, RIG_TAGS, SUPERVISORS, Team, ToolModel, ToolType
from stoper.error import StoperError
from stoper.routers import auth, tools, withdrawals, reports
from stoper.schemas import CatalogResponse
from stoper.services.gateway import SqlGateway
from stoper.services.inventory import InventoryService

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db.create_db_and_tables()
    with Session(db.engine) as session:
        InventoryService(SqlGateway(session)).ensure_catalog()
    yield
    logger.info("service stopped")


app = FastAPI(title="STOPER - Controle de Ferramental de Perfuração", lifespan=lifespan)

app.include_router(auth.router)
app.include_router(tools.router)
app.include_router(withdrawals.router)
app.include_router(reports.router)


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/catalog", response_model=CatalogResponse)
def catalog():
    return {
        "models": [m.value for m in ToolModel],
        "types": [t.value for t in ToolType],
        "teams": [t.value for t in Team],
        "reasons": REASONS,
        "supervisors": SUPERVISORS,
        "rig_tags": RIG_TAGS,
    }


@app.exception_handler(StoperError)
async def stoper_exception_handler(request: Request, exc: StoperError):
    log = logger.error if exc.status_code >= 500 else logger.info
    log("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"code": "VALIDATION_ERROR", "message": "Falha na validação dos parâmetros", "errors": exc.errors()},
    )
