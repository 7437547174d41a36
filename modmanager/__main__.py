import logging

import uvicorn

from .config import load_settings
from .main import create_app


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings)
    logging.getLogger(__name__).info(
        "Mod Manager running at http://%s:%s (mods=%s, files=%s)",
        settings.host,
        settings.port,
        settings.mods_dir,
        settings.files_dir,
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
