# academy_loader/__main__.py

from .main import cli

cli()
