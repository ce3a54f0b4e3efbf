import uvicorn

from task_resolver.api.app import create_app
from task_resolver.config.settings import Settings
from task_resolver.logging.logger import Log
from task_resolver.resolution.engine import build_engine


def main() -> None:
    """Entry point: load settings -> build engine -> serve the HTTP app."""
    settings = Settings()
    Log.configure(settings.log_level)

    engine = build_engine(settings)
    app = create_app(settings, engine=engine)
    Log.info(f"Serving task resolver on {settings.host}:{settings.port} ({settings.app_env})")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
