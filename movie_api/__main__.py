"""python -m movie_api — run the HTTP server."""

import sys

from movie_api.server import main

if __name__ == "__main__":
    sys.exit(main())
