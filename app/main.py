from fastapi import FastAPI
import logging
from app.core.config import settings
from app.api import health, customers, audit

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

# Include routers
app.include_router(health.router)
app.include_router(customers.router)
app.include_router(audit.router)

@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.PROJECT_NAME} starting. Audit log: {settings.AUDIT_LOG_FILE}")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
