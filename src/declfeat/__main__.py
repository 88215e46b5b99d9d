from declfeat.cli.main import cli

cli()
