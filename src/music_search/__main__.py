"""Entry point for running as a module."""
from music_search.config import Settings, configure_logging, load_local_env_file
import uvicorn


def main() -> None:
    load_local_env_file()
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    from music_search.api import app

    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
