from linker.main import cli

cli()
