"""WSGI entry point for the household income planner application."""

import os
import sys
from typing import List, Mapping

from income_planner import create_app
from income_planner.config import get_global_settings

app = create_app()


def resolve_port(argv: List[str], environ: Mapping[str, str], default: int = 5000) -> int:
    """Port from ``--port N`` on the command line, else ``PORT``, else the default."""
    if "--port" in argv:
        index = argv.index("--port")
        if index + 1 < len(argv):
            return int(argv[index + 1])
    if "PORT" in environ:
        return int(environ["PORT"])
    return default


if __name__ == "__main__":
    debug = get_global_settings().app_env == "development"
    app.run(debug=debug, host="0.0.0.0", port=resolve_port(sys.argv[1:], os.environ))
