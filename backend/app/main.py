# LedgerDesk billing backend entrypoint.

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from backend.app.core.settings import get_settings
from backend.app.core.exceptions import BillingError, billing_error_handler
from backend.app.core.logging import configure_logging
from backend.app.api import projects
from backend.app.api import tasks
from backend.app.api import invoices
from backend.app.api import receivables
from backend.app.api import revenue
from backend.app.api import tax
from backend.app.api import exchange_rates
from backend.app.api import admin_cleanup
from backend.app.db.base import Base
from backend.app.db.session import engine

settings = get_settings()
app = FastAPI(title=settings.app_name, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(BillingError, billing_error_handler)

app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(invoices.router)
app.include_router(receivables.router)
app.include_router(revenue.router)
app.include_router(tax.router)
app.include_router(exchange_rates.router)
app.include_router(admin_cleanup.router)


@app.get("/")
def read_root():
    return {"app": "LedgerDesk billing backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def prepare_database():
    configure_logging()
    Base.metadata.create_all(bind=engine)
