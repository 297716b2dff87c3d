from confluence.cli.commands import cli

cli()
