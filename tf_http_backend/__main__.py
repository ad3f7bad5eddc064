"""Allow running the backend with ``python -m tf_http_backend``."""

from tf_http_backend.cli import cli

if __name__ == "__main__":
    cli()
