from __future__ import annotations

from tienda.application.container import build_container
from tienda.config import get_app_paths, load_settings
from tienda.logging_config import setup_logging
from tienda.ui.app import App


def main() -> None:
    paths = get_app_paths()
    settings = load_settings()
    setup_logging(paths.logs_dir, level=settings.log_level)

    container = build_container(paths.db_path, settings)

    app = App(container, logs_dir=str(paths.logs_dir))
    app.mainloop()


if __name__ == "__main__":
    main()
