from pagecreator.cli import cli

cli()
