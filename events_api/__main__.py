import uvicorn

from events_api.config import Settings


def main():
    settings = Settings.from_env()
    uvicorn.run("events_api.api.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
