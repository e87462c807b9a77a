"""Allow ``python -m starz_lead_engine``."""

from .cli.main import cli

if __name__ == "__main__":
    cli()
