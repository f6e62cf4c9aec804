from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import time
from sqlalchemy.exc import OperationalError

from diagen import __version__, config
from diagen.api.routes import router
from diagen.db.session import engine
from diagen.db.models import Base
from diagen.icons.index import load_icon_index

app = FastAPI(
    title="Diagen - Architecture Diagram Generator",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials="*" not in config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.on_event("startup")
def build_icon_index():
    # Read-only after this point, shared by every request
    app.state.icon_index = load_icon_index()


@app.on_event("startup")
def connect_database():
    retries = 5
    delay = 2

    for attempt in range(retries):
        try:
            Base.metadata.create_all(bind=engine)
            print("✅ Database connected")
            return
        except OperationalError:
            print(f"⏳ Waiting for database... ({attempt + 1}/{retries})")
            time.sleep(delay)

    # Generation keeps working, only the log is lost
    print("⚠️ Database not ready, running without persistence")
